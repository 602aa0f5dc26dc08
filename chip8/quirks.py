# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html
#
# every switch defaults to off: the interpreter then shifts VX in place, leaves VF alone on
# OR/AND/XOR, leaves I untouched on bulk load/store and clips sprites at the screen edges
from typing import NamedTuple


class Quirks(NamedTuple):
    shift_uses_vy: bool = False         # 8XY6/8XYE: copy VY into VX before shifting
    logic_resets_vf: bool = False       # 8XY1/8XY2/8XY3: reset VF to 0
    load_store_moves_i: bool = False    # FX55/FX65: leave I pointing past the last register
    wrap_sprites: bool = False          # DXYN: wrap pixels that fall off the grid instead of clipping them


DEFAULT_QUIRKS = Quirks()
