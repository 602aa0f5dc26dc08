import time


DEFAULT_SPEED = 500     # instructions per second
TIMER_HZ = 60
TIMER_PERIOD = 1 / TIMER_HZ


class Scheduler:
    """
    drives a Chip8 instance: one instruction per step and the two timers at 60Hz whatever the instruction rate

    poll_input() -> iterable of (key, held) pairs, applied to the keypad before each instruction
    on_frame(chip) is called right after every timer tick, that's when the host renders the framebuffer
    clock() returns seconds as a float, pace() is called after every step to hold the instruction rate
    """
    def __init__(self, chip, speed=DEFAULT_SPEED, poll_input=None, on_frame=None, clock=time.monotonic, pace=None):
        if speed <= 0:
            raise ValueError("speed must be a positive number of instructions per second")
        self.chip = chip
        self.speed = speed
        self.poll_input = poll_input
        self.on_frame = on_frame
        self.clock = clock
        self.pace = pace or self._sleep_until_next_slot
        self.last_tick = clock()
        self.next_slot = self.last_tick

    def step(self):
        # process user input
        if self.poll_input:
            for key, held in self.poll_input() or ():
                self.chip.keypad[key] = held
        # emulate one machine cycle (fetch opcode, decode opcode, execute opcode)
        self.chip.cycle()
        # delay/sound timers
        now = self.clock()
        if now - self.last_tick >= TIMER_PERIOD:
            self.chip.tick_timers()
            self.last_tick += TIMER_PERIOD
            if now - self.last_tick >= TIMER_PERIOD:
                self.last_tick = now    # fell behind by more than one tick: drop the backlog
            if self.on_frame:
                self.on_frame(self.chip)

    def run(self, running=lambda: True):
        """step until running() turns false, a fatal Chip8Error stops the loop and propagates"""
        self.last_tick = self.next_slot = self.clock()
        while running():
            self.step()
            self.pace()

    def _sleep_until_next_slot(self):
        self.next_slot += 1 / self.speed
        delay = self.next_slot - self.clock()
        if delay > 0:
            time.sleep(delay)
        else:
            self.next_slot = self.clock()
