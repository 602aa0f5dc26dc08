from .errors import MemoryAccessError, RomLoadError, StackOverflowError, StackUnderflowError


# ******************** STATIC SECTION
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

MEMORY_SIZE = 4096
FONT_START_ADDRESS = 0x050
FONT_GLYPH_SIZE = 5             # each character is 5 rows of 8 pixels
ROM_START_ADDRESS = 0x200
ROM_MAX_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_DEPTH = 16


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, depth=STACK_DEPTH):
        self.addr_list = []
        self.depth = depth

    def __len__(self):
        return len(self.addr_list)

    def __repr__(self):
        return "[" + ", ".join(f"0x{addr:04x}" for addr in self.addr_list) + "]"

    def full(self):
        return len(self.addr_list) >= self.depth

    def append(self, address):
        if self.full():
            raise StackOverflowError()
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackUnderflowError()
        return self.addr_list.pop()

    def clear(self):
        self.addr_list.clear()

# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.load_fonts()

    def __getitem__(self, index):
        return self.inner[index]

    def __len__(self):
        return len(self.inner)

    def load_fonts(self):
        self.inner[FONT_START_ADDRESS:FONT_START_ADDRESS+len(FONT_SET)] = FONT_SET

    def load_rom(self, rom):
        """copy the ROM bytes verbatim at 0x200, raise RomLoadError if they don't fit"""
        if len(rom) > ROM_MAX_SIZE:
            raise RomLoadError(len(rom), ROM_MAX_SIZE)
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom

    def _check_range(self, address, length):
        if address < 0 or address + length > len(self.inner):
            raise MemoryAccessError(address, length)

    def read(self, address, length):
        self._check_range(address, length)
        return self.inner[address:address+length]

    def write(self, address, data):
        """bounds are checked before anything is written, a bytearray slice would grow instead of failing"""
        data = bytes(data)
        self._check_range(address, len(data))
        self.inner[address:address+len(data)] = data

    def read_word(self, address):
        """instructions are stored big-endian, two bytes each"""
        self._check_range(address, 2)
        return self.inner[address] << 8 | self.inner[address + 1]

    def clear(self):
        self.inner[:] = bytes(MEMORY_SIZE)
        self.load_fonts()
