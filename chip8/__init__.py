from .decoder import Opcode, decode
from .display import Framebuffer, Keypad
from .errors import (
    Chip8Error,
    MemoryAccessError,
    RomLoadError,
    StackError,
    StackOverflowError,
    StackUnderflowError,
    UnknownInstructionError,
)
from .machine import Chip8
from .memory import FONT_SET, FONT_START_ADDRESS, ROM_START_ADDRESS, Memory, Stack
from .quirks import DEFAULT_QUIRKS, Quirks
from .scheduler import Scheduler
