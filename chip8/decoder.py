from typing import NamedTuple


class Opcode(NamedTuple):
    """a 16-bit instruction split into the fields every instruction family draws its operands from"""
    opcode: int     # raw word
    first: int      # top nibble, selects the instruction family
    x: int          # second nibble, register index
    y: int          # third nibble, register index
    n: int          # fourth nibble, 4-bit immediate
    nn: int         # low byte, 8-bit immediate
    nnn: int        # low 12 bits, address

    def __str__(self):
        return f"0x{self.opcode:04x}"


def decode(word: int) -> Opcode:
    """split a big-endian instruction word into its nibbles, bytes and address"""
    word &= 0xFFFF
    return Opcode(
        opcode=word,
        first=word >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )
