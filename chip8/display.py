SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
KEY_COUNT = 16


# ******************** I/O SECTION
class Framebuffer:
    """
    64x32 monochrome pixel grid, stored row by row
    only the draw and clear instructions write it, the host renderer reads it through snapshot()
    """
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [False] * w * h

    def __getitem__(self, pos):
        x, y = pos
        return self.buffer[y * self.w + x]

    def __str__(self):
        return "\n".join(
            "".join("#" if lit else "." for lit in row) for row in self.rows()
        )

    def contains(self, x, y):
        return 0 <= x < self.w and 0 <= y < self.h

    def flip(self, x, y):
        """XOR a lit sprite bit onto the pixel, return True if the pixel was already on (collision)"""
        idx = y * self.w + x
        was_on = self.buffer[idx]
        self.buffer[idx] = not was_on
        return was_on

    def clear(self):
        self.buffer = [False] * self.w * self.h

    def rows(self):
        for y in range(self.h):
            yield self.buffer[y * self.w:(y + 1) * self.w]

    def snapshot(self):
        """return an immutable copy of the whole grid, safe to hand to a renderer"""
        return tuple(tuple(row) for row in self.rows())


class Keypad:
    """latch of the 16 logical keys: True while a key is held down"""
    def __init__(self):
        self.held = [False] * KEY_COUNT

    def __getitem__(self, key):
        return self.held[key]

    def __setitem__(self, key, value):
        self.held[key] = bool(value)

    def __repr__(self):
        return "".join(f"{k:x}" if down else "-" for k, down in enumerate(self.held))

    def pressed(self, key):
        """a value with no matching key (16 and up) is never held"""
        return key < KEY_COUNT and self.held[key]

    def untouched(self):
        return not any(self.held)

    def first(self):
        """get the lowest key currently held, None if there is none"""
        for key, down in enumerate(self.held):
            if down:
                return key
        return None

    def release_all(self):
        self.held = [False] * KEY_COUNT
