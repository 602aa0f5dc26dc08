import unittest
from chip8.errors import MemoryAccessError, RomLoadError, StackOverflowError, StackUnderflowError
from chip8.memory import FONT_SET, FONT_START_ADDRESS, MEMORY_SIZE, ROM_MAX_SIZE, ROM_START_ADDRESS, Memory, Stack


class TestMemory(unittest.TestCase):
    def test_fonts_loaded(self):
        mem = Memory()
        self.assertEqual(len(FONT_SET), 80)
        self.assertEqual(bytes(mem[FONT_START_ADDRESS:FONT_START_ADDRESS+80]), FONT_SET)
        self.assertEqual(mem[0x000], 0)

    def test_load_rom(self):
        mem = Memory()
        mem.load_rom(b"\x12\x34\x56")
        self.assertEqual(mem[ROM_START_ADDRESS], 0x12)
        self.assertEqual(mem.read_word(ROM_START_ADDRESS), 0x1234)

    def test_load_rom_full_size(self):
        mem = Memory()
        mem.load_rom(bytes([0xAB]) * ROM_MAX_SIZE)
        self.assertEqual(mem[MEMORY_SIZE - 1], 0xAB)
        self.assertEqual(len(mem), MEMORY_SIZE)

    def test_load_rom_too_big(self):
        mem = Memory()
        with self.assertRaises(RomLoadError) as ctx:
            mem.load_rom(bytes(ROM_MAX_SIZE + 1))
        self.assertEqual(ctx.exception.size, ROM_MAX_SIZE + 1)
        self.assertEqual(ctx.exception.capacity, 3584)
        self.assertEqual(mem[ROM_START_ADDRESS], 0)

    def test_write_out_of_range(self):
        mem = Memory()
        with self.assertRaises(MemoryAccessError) as ctx:
            mem.write(MEMORY_SIZE - 1, b"\x01\x02")
        self.assertEqual(ctx.exception.address, MEMORY_SIZE - 1)
        self.assertEqual(ctx.exception.length, 2)
        self.assertEqual(len(mem), MEMORY_SIZE)
        self.assertEqual(mem[MEMORY_SIZE - 1], 0)

    def test_read_out_of_range(self):
        mem = Memory()
        with self.assertRaises(MemoryAccessError):
            mem.read(MEMORY_SIZE - 2, 3)

    def test_read_word_out_of_range(self):
        mem = Memory()
        self.assertEqual(mem.read_word(MEMORY_SIZE - 2), 0)
        with self.assertRaises(MemoryAccessError):
            mem.read_word(MEMORY_SIZE - 1)
        with self.assertRaises(MemoryAccessError):
            mem.read_word(0x10FE)

    def test_read_write(self):
        mem = Memory()
        mem.write(0x300, (1, 2, 3))
        self.assertEqual(bytes(mem.read(0x300, 3)), b"\x01\x02\x03")

    def test_clear_keeps_fonts(self):
        mem = Memory()
        mem.write(0x300, b"\xff")
        mem.clear()
        self.assertEqual(mem[0x300], 0)
        self.assertEqual(mem[FONT_START_ADDRESS], FONT_SET[0])


class TestStack(unittest.TestCase):
    def test_lifo(self):
        stack = Stack()
        stack.append(0x202)
        stack.append(0x304)
        self.assertEqual(stack.pop(), 0x304)
        self.assertEqual(stack.pop(), 0x202)
        self.assertEqual(len(stack), 0)

    def test_overflow(self):
        stack = Stack()
        for addr in range(16):
            stack.append(addr)
        self.assertTrue(stack.full())
        with self.assertRaises(StackOverflowError):
            stack.append(0x200)
        self.assertEqual(len(stack), 16)

    def test_underflow(self):
        with self.assertRaises(StackUnderflowError):
            Stack().pop()


if __name__ == "__main__":
    unittest.main()
