"""pygame host: window, keyboard and ROM file, everything the interpreter core doesn't know about"""
import argparse
import os
import sys

os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
)

from .display import SCREEN_HEIGHT, SCREEN_WIDTH
from .errors import Chip8Error
from .machine import DEBUG, Chip8
from .quirks import Quirks
from .scheduler import DEFAULT_SPEED, Scheduler


# ******************** STATIC SECTION
# the COSMAC VIP hex keypad laid over the left side of a QWERTY keyboard
KEY_MAPPINGS = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}

SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("-s", "--speed", type=int, default=DEFAULT_SPEED, help="instructions per second")
    parser.add_argument("--scale", type=int, default=SCALE, help="size in window pixels of a CHIP-8 pixel")
    parser.add_argument("--wrap", action="store_true", help="wrap sprites around the screen edges instead of clipping them")
    return parser.parse_args(argv)

def read_rom(path):
    with open(path, mode='rb') as f:
        rom = f.read()
    if DEBUG: print(f"The ROM at path {path} has been read successfully")
    return rom


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode((w * self.scale, h * self.scale))
        self.surface.fill(self.background)

    def render(self, rows):
        """paint a framebuffer snapshot, one rectangle per lit pixel"""
        self.surface.fill(self.background)
        for y, row in enumerate(rows):
            for x, lit in enumerate(row):
                if lit:
                    pygame.draw.rect(
                        self.surface,
                        self.foreground,
                        (x * self.scale, y * self.scale, self.scale, self.scale)
                    )
        pygame.display.flip()


class Host:
    """the input, render and sound collaborators the scheduler talks to"""
    def __init__(self, screen, title):
        self.screen = screen
        self.title = title
        self.running = True
        self.beeping = False

    def poll_input(self):
        # loop through the event queue
        transitions = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key in KEY_MAPPINGS:
                    transitions.append((KEY_MAPPINGS[event.key], event.type == pygame.KEYDOWN))
        return transitions

    def on_frame(self, chip):
        if chip.draw:
            self.screen.render(chip.framebuffer.snapshot())
            chip.draw = False
        # no audio, the beeper shows up in the title bar while the sound timer runs
        if chip.sound_active != self.beeping:
            self.beeping = chip.sound_active
            pygame.display.set_caption(f"{self.title} *BEEP*" if self.beeping else self.title)


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    try:
        rom = read_rom(args.file)
    except OSError as err:
        sys.exit(f"cannot read ROM {args.file}: {err}")
    # pygame initialization
    pygame.init()
    clock = pygame.time.Clock()
    title = os.path.basename(args.file)
    pygame.display.set_caption(title)
    host = Host(Screen(s=args.scale), title)
    # CPU
    chip = Chip8(quirks=Quirks(wrap_sprites=args.wrap))
    try:
        chip.load_rom(rom)
        scheduler = Scheduler(
            chip,
            speed=args.speed,
            poll_input=host.poll_input,
            on_frame=host.on_frame,
            pace=lambda: clock.tick(args.speed),
        )
        scheduler.run(lambda: host.running)
    except Chip8Error as err:
        sys.exit(f"********** THE EMULATOR CRASHED: {err}\n{chip}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
