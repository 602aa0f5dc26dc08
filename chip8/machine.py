# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908


import os
import random
from functools import wraps

from .decoder import decode
from .display import Framebuffer, Keypad
from .errors import Chip8Error, UnknownInstructionError
from .memory import FONT_GLYPH_SIZE, FONT_START_ADDRESS, ROM_START_ADDRESS, Memory, Stack
from .quirks import DEFAULT_QUIRKS


DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being executed"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, op):
            fn(self, op)
            if DEBUG:
                print(msg.format(mem_addr=self.addr, x=op.x, y=op.y, n=op.n, nn=op.nn, nnn=op.nnn))
        return wrapper_fn
    return decorator


# ******************** CPU SECTION
class Chip8:
    """
    the whole machine: memory, registers, stack, timers, framebuffer and keypad
    cycle() runs exactly one fetch/decode/execute step, timers are ticked from outside by the scheduler
    """
    def __init__(self, quirks=DEFAULT_QUIRKS, rng=None):
        self.quirks = quirks
        self.rng = rng or random.Random()
        self.mem = Memory()
        self.stack = Stack()
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()
        self.rom = b""
        self._power_on()
        # instruction families that share a top nibble are told apart by a second key (see lookup)
        self.instructions = {
            (0x0, 0xE0): self._clear_screen,
            (0x0, 0xEE): self._return,
            (0x1, None): self._jump,
            (0x2, None): self._call_addr,
            (0x3, None): self._skip_if_eq,
            (0x4, None): self._skip_if_not_eq,
            (0x5, 0x0): self._skip_if_eq_regs,
            (0x6, None): self._set_vx,
            (0x7, None): self._add_to_vx,
            (0x8, 0x0): self._set_vx_to_vy,
            (0x8, 0x1): self._set_vx_or_vy,
            (0x8, 0x2): self._set_vx_and_vy,
            (0x8, 0x3): self._set_vx_xor_vy,
            (0x8, 0x4): self._add_vx_vy,
            (0x8, 0x5): self._sub_vx_vy,
            (0x8, 0x6): self._shr,
            (0x8, 0x7): self._subn_vx_vy,
            (0x8, 0xE): self._shl,
            (0x9, 0x0): self._skip_if_not_eq_regs,
            (0xA, None): self._set_idx,
            (0xB, None): self._jump_plus,
            (0xC, None): self._random_byte_and,
            (0xD, None): self._to_screen,
            (0xE, 0x9E): self._skip_if_pressed,
            (0xE, 0xA1): self._skip_if_not_pressed,
            (0xF, 0x07): self._set_vx_dt,
            (0xF, 0x0A): self._wait_keypress,
            (0xF, 0x15): self._set_dt_vx,
            (0xF, 0x18): self._set_st,
            (0xF, 0x1E): self._add_to_idx,
            (0xF, 0x29): self._select_char,
            (0xF, 0x33): self._bcd_repr,
            (0xF, 0x55): self._store_vregs,
            (0xF, 0x65): self._load_vregs,
        }

    def _power_on(self):
        self.v_regs = bytearray(16)
        self.pc = ROM_START_ADDRESS
        self.addr = ROM_START_ADDRESS   # address of the instruction being executed
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.draw = False
        self.halted = False
        self.error = None

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{list(self.v_regs)}"
        stack = f"STACK:{self.stack}"
        timers = f"DT:{self.dt} | ST:{self.st}"
        flags = f"DRAW:{self.draw} | HALTED:{self.halted} | KEYPAD:{self.keypad!r}"
        return f"{registers}\n{stack}\n{timers}\n{flags}"

    @property
    def sound_active(self):
        return self.st > 0

    def load_rom(self, rom):
        """place the ROM bytes at 0x200, the previous program is kept if it doesn't fit"""
        self.mem.load_rom(rom)
        self.rom = bytes(rom)
        if DEBUG: print(f"ROM of {len(rom)} bytes loaded at 0x{ROM_START_ADDRESS:04x}")

    def reset(self):
        """back to the power-on state, with the last loaded ROM placed in memory again"""
        self.mem.clear()
        self.mem.load_rom(self.rom)
        self.stack.clear()
        self.framebuffer.clear()
        self.keypad.release_all()
        self._power_on()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, op):
        self.framebuffer.clear()
        self.draw = True

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, op):
        """return from a subroutine"""
        self.pc = self.stack.pop()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{nnn:03x}")
    def _jump(self, op):
        self.pc = op.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{nnn:03x}")
    def _call_addr(self, op):
        self.stack.append(self.pc)
        self.pc = op.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, 0x{nn:02x}")
    def _skip_if_eq(self, op):
        if self.v_regs[op.x] == op.nn:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, 0x{nn:02x}")
    def _skip_if_not_eq(self, op):
        if self.v_regs[op.x] != op.nn:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, op):
        if self.v_regs[op.x] == self.v_regs[op.y]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, op):
        if self.v_regs[op.x] != self.v_regs[op.y]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, 0x{nn:02x}")
    def _set_vx(self, op):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[op.x] = op.nn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, 0x{nn:02x}")
    def _add_to_vx(self, op):
        """add to the value already present in Vx, the carry flag is not changed"""
        self.v_regs[op.x] = (self.v_regs[op.x] + op.nn) & 0xFF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, op):
        self.v_regs[op.x] = self.v_regs[op.y]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, op):
        self.v_regs[op.x] |= self.v_regs[op.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, op):
        self.v_regs[op.x] &= self.v_regs[op.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, op):
        self.v_regs[op.x] ^= self.v_regs[op.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    # the arithmetic below reads both operands before writing anything: x, y and F may be the same register
    # and VF is always written last

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, op):
        """set Vx = Vx + Vy, VF = carry"""
        total = self.v_regs[op.x] + self.v_regs[op.y]
        self.v_regs[op.x] = total & 0xFF
        self.v_regs[0xF] = 1 if total > 0xFF else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, op):
        """set Vx = Vx - Vy, VF = NOT borrow"""
        vx, vy = self.v_regs[op.x], self.v_regs[op.y]
        self.v_regs[op.x] = (vx - vy) & 0xFF
        self.v_regs[0xF] = 1 if vx >= vy else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, op):
        """set Vx = Vy - Vx, VF = NOT borrow"""
        vx, vy = self.v_regs[op.x], self.v_regs[op.y]
        self.v_regs[op.x] = (vy - vx) & 0xFF
        self.v_regs[0xF] = 1 if vy >= vx else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x:X}")
    def _shr(self, op):
        """set Vx = Vx SHR 1, VF = the bit shifted out"""
        value = self.v_regs[op.y] if self.quirks.shift_uses_vy else self.v_regs[op.x]
        self.v_regs[op.x] = value >> 1
        self.v_regs[0xF] = value & 0x1

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x:X}")
    def _shl(self, op):
        """set Vx = Vx SHL 1, VF = the bit shifted out"""
        value = self.v_regs[op.y] if self.quirks.shift_uses_vy else self.v_regs[op.x]
        self.v_regs[op.x] = (value << 1) & 0xFF
        self.v_regs[0xF] = (value & 0x80) >> 7

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{nnn:03x}")
    def _set_idx(self, op):
        self.idx = op.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{nnn:03x}")
    def _jump_plus(self, op):
        self.pc = op.nnn + self.v_regs[0x0]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x:X}, 0x{nn:02x}")
    def _random_byte_and(self, op):
        self.v_regs[op.x] = self.rng.randint(0, 255) & op.nn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x:X}, V{y:X}, {n}")
    def _to_screen(self, op):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        fb = self.framebuffer
        x, y = self.v_regs[op.x] % fb.w, self.v_regs[op.y] % fb.h
        sprite = self.mem.read(self.idx, op.n)
        collision = False
        for row, sprite_byte in enumerate(sprite):
            for col in range(8):
                if not (sprite_byte >> (7 - col)) & 0x1:
                    continue
                px, py = x + col, y + row
                if self.quirks.wrap_sprites:
                    px, py = px % fb.w, py % fb.h
                elif not fb.contains(px, py):
                    continue    # clipped at the right and bottom edges
                # sprites are XORed onto the screen, a lit pixel turned off again is a collision
                if fb.flip(px, py):
                    collision = True
        self.v_regs[0xF] = 1 if collision else 0
        self.draw = True

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x:X}")
    def _skip_if_pressed(self, op):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        if self.keypad.pressed(self.v_regs[op.x]):
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x:X}")
    def _skip_if_not_pressed(self, op):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        if not self.keypad.pressed(self.v_regs[op.x]):
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, DT")
    def _set_vx_dt(self, op):
        self.v_regs[op.x] = self.dt

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, K")
    def _wait_keypress(self, op):
        """wait for a key press and store its value in Vx"""
        key = self.keypad.first()
        if key is None:
            self.pc -= 0x2      # stay on the same instruction until a key is pressed
        else:
            self.v_regs[op.x] = key

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x:X}")
    def _set_dt_vx(self, op):
        self.dt = self.v_regs[op.x]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{x:X}")
    def _set_st(self, op):
        self.st = self.v_regs[op.x]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{x:X}")
    def _add_to_idx(self, op):
        """set I = I + Vx, VF is not affected"""
        self.idx = (self.idx + self.v_regs[op.x]) & 0xFFFF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{x:X}")
    def _select_char(self, op):
        """set I to location of sprite for digit Vx"""
        self.idx = FONT_START_ADDRESS + self.v_regs[op.x] * FONT_GLYPH_SIZE

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x:X}")
    def _bcd_repr(self, op):
        """store the hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[op.x]
        self.mem.write(self.idx, (value // 100, value // 10 % 10, value % 10))

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x:X}")
    def _store_vregs(self, op):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem.write(self.idx, self.v_regs[:op.x+1])
        if self.quirks.load_store_moves_i:
            self.idx += op.x + 1

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, [I]")
    def _load_vregs(self, op):
        """read registers V0 through Vx (included) from memory starting at location I"""
        self.v_regs[:op.x+1] = self.mem.read(self.idx, op.x + 1)
        if self.quirks.load_store_moves_i:
            self.idx += op.x + 1

    def _goto_next_instruction(self):
        self.pc += 0x2

    def lookup(self, op):
        """return the handler of a decoded instruction, raise UnknownInstructionError if there is none"""
        if op.first in (0x0, 0xE, 0xF):
            key = (op.first, op.nn)
        elif op.first in (0x5, 0x8, 0x9):
            key = (op.first, op.n)
        else:
            key = (op.first, None)
        try:
            return self.instructions[key]
        except KeyError:
            raise UnknownInstructionError(op.opcode) from None

    def cycle(self):
        """
        fetch, decode and execute a single instruction
        a fatal error halts the machine with pc left on the offending instruction, then it's raised again
        by every following call until reset()
        """
        if self.halted:
            raise self.error
        self.addr = self.pc
        try:
            # fetch (each instruction is two bytes long)
            op = decode(self.mem.read_word(self.addr))
            if DEBUG: print(f"opcode: {op}", end="    ")
            instruction = self.lookup(op)
            self._goto_next_instruction()
            instruction(op)
        except Chip8Error as err:
            self.pc = self.addr
            if err.pc is None:
                err.pc = self.addr
            self.halted, self.error = True, err
            raise

    def tick_timers(self):
        """delay/sound timers (dt/st) count down at 60Hz and stop at zero"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1
