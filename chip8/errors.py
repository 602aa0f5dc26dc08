# ********** FATAL CONDITIONS RAISED BY THE CHIP-8 CORE
# none of them is recoverable at the instruction level: the machine halts and the host decides what to do


class Chip8Error(Exception):
    """base class for every condition that stops the machine, pc is the address of the offending instruction"""
    def __init__(self, msg, pc=None):
        super().__init__(msg)
        self.pc = pc

    def __str__(self):
        msg = super().__str__()
        if self.pc is None:
            return msg
        return f"{msg} (pc: 0x{self.pc:04x})"


class UnknownInstructionError(Chip8Error):
    def __init__(self, opcode, pc=None):
        super().__init__(f"unknown instruction 0x{opcode:04x}", pc)
        self.opcode = opcode


class StackError(Chip8Error):
    pass


class StackOverflowError(StackError):
    def __init__(self, pc=None):
        super().__init__("The CHIP-8 stack can contain at most 16 addresses. Limit exceeded", pc)


class StackUnderflowError(StackError):
    def __init__(self, pc=None):
        super().__init__("return from subroutine with an empty stack", pc)


class RomLoadError(Chip8Error):
    def __init__(self, size, capacity):
        super().__init__(f"ROM of {size} bytes does not fit in the {capacity} bytes available")
        self.size = size
        self.capacity = capacity


class MemoryAccessError(Chip8Error):
    def __init__(self, address, length):
        super().__init__(f"memory access 0x{address:04x}+{length} out of range")
        self.address = address
        self.length = length
