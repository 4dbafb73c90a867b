"""CHIP-8 instruction decoding.

A raw 16-bit word is decoded once into a :class:`DecodedInstruction` whose
``op`` field tags which of the :class:`Op` variants it is. Words matching no
pattern decode to ``Op.INVALID`` so the dispatcher can fault on them.
"""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    CLS = 0        # 00E0
    RET = 1        # 00EE
    JP = 2         # 1nnn
    CALL = 3       # 2nnn
    SE_IMM = 4     # 3xkk
    SNE_IMM = 5    # 4xkk
    SE_REG = 6     # 5xy0
    LD_IMM = 7     # 6xkk
    ADD_IMM = 8    # 7xkk
    LD_REG = 9     # 8xy0
    OR = 10        # 8xy1
    AND = 11       # 8xy2
    XOR = 12       # 8xy3
    ADD_REG = 13   # 8xy4
    SUB = 14       # 8xy5
    SHR = 15       # 8xy6
    SUBN = 16      # 8xy7
    SHL = 17       # 8xyE
    SNE_REG = 18   # 9xy0
    LD_I = 19      # Annn
    JP_V0 = 20     # Bnnn
    RND = 21       # Cxkk
    DRW = 22       # Dxyn
    SKP = 23       # Ex9E
    SKNP = 24      # ExA1
    LD_VX_DT = 25  # Fx07
    LD_KEY = 26    # Fx0A
    LD_DT = 27     # Fx15
    LD_ST = 28     # Fx18
    ADD_I = 29     # Fx1E
    LD_FONT = 30   # Fx29
    LD_BCD = 31    # Fx33
    STORE = 32     # Fx55
    LOAD = 33      # Fx65
    INVALID = 34


# (op, mask, value): a word is ``op`` when ``word & mask == value``.
PATTERNS = (
    (Op.CLS, 0xFFFF, 0x00E0),
    (Op.RET, 0xFFFF, 0x00EE),
    (Op.JP, 0xF000, 0x1000),
    (Op.CALL, 0xF000, 0x2000),
    (Op.SE_IMM, 0xF000, 0x3000),
    (Op.SNE_IMM, 0xF000, 0x4000),
    (Op.SE_REG, 0xF00F, 0x5000),
    (Op.LD_IMM, 0xF000, 0x6000),
    (Op.ADD_IMM, 0xF000, 0x7000),
    (Op.LD_REG, 0xF00F, 0x8000),
    (Op.OR, 0xF00F, 0x8001),
    (Op.AND, 0xF00F, 0x8002),
    (Op.XOR, 0xF00F, 0x8003),
    (Op.ADD_REG, 0xF00F, 0x8004),
    (Op.SUB, 0xF00F, 0x8005),
    (Op.SHR, 0xF00F, 0x8006),
    (Op.SUBN, 0xF00F, 0x8007),
    (Op.SHL, 0xF00F, 0x800E),
    (Op.SNE_REG, 0xF00F, 0x9000),
    (Op.LD_I, 0xF000, 0xA000),
    (Op.JP_V0, 0xF000, 0xB000),
    (Op.RND, 0xF000, 0xC000),
    (Op.DRW, 0xF000, 0xD000),
    (Op.SKP, 0xF0FF, 0xE09E),
    (Op.SKNP, 0xF0FF, 0xE0A1),
    (Op.LD_VX_DT, 0xF0FF, 0xF007),
    (Op.LD_KEY, 0xF0FF, 0xF00A),
    (Op.LD_DT, 0xF0FF, 0xF015),
    (Op.LD_ST, 0xF0FF, 0xF018),
    (Op.ADD_I, 0xF0FF, 0xF01E),
    (Op.LD_FONT, 0xF0FF, 0xF029),
    (Op.LD_BCD, 0xF0FF, 0xF033),
    (Op.STORE, 0xF0FF, 0xF055),
    (Op.LOAD, 0xF0FF, 0xF065),
)

MNEMONICS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP 0x{nnn:03X}",
    Op.CALL: "CALL 0x{nnn:03X}",
    Op.SE_IMM: "SE V{x:X}, 0x{nn:02X}",
    Op.SNE_IMM: "SNE V{x:X}, 0x{nn:02X}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_IMM: "LD V{x:X}, 0x{nn:02X}",
    Op.ADD_IMM: "ADD V{x:X}, 0x{nn:02X}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, 0x{nnn:03X}",
    Op.JP_V0: "JP V0, 0x{nnn:03X}",
    Op.RND: "RND V{x:X}, 0x{nn:02X}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_KEY: "LD V{x:X}, K",
    Op.LD_DT: "LD DT, V{x:X}",
    Op.LD_ST: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_FONT: "LD F, V{x:X}",
    Op.LD_BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.INVALID: "??? 0x{raw:04X}",
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op tag
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def x_index(instruction) -> int:
    """Index of the VX register named by the second nibble."""
    return (instruction & 0x0F00) >> 8


def y_index(instruction) -> int:
    """Index of the VY register named by the third nibble."""
    return (instruction & 0x00F0) >> 4


def classify(instruction):
    """Return the ``Op`` tag of a word as an int32 array."""
    return jnp.select(
        [(instruction & mask) == value for _, mask, value in PATTERNS],
        [jnp.int32(int(op)) for op, _, _ in PATTERNS],
        default=jnp.int32(int(Op.INVALID)),
    )


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction).astype(jnp.int32) & 0xFFFF
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=x_index(instruction),
        y=y_index(instruction),
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def lookup(instruction: int) -> Op:
    """Pure-Python classification, for host-side diagnostics."""
    for op, mask, value in PATTERNS:
        if instruction & mask == value:
            return op
    return Op.INVALID


def disassemble(instruction: int) -> str:
    """Render a word as an assembly mnemonic, e.g. ``DRW VA, VB, 2``."""
    instruction = int(instruction) & 0xFFFF
    return MNEMONICS[lookup(instruction)].format(
        raw=instruction,
        x=x_index(instruction),
        y=y_index(instruction),
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
    )
