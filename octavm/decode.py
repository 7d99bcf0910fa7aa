"""Splitting a 16-bit CHIP-8 word into its operand fields."""

from chex import dataclass

from octavm.constants import ADDRESS_MASK, WORD_MASK


@dataclass(frozen=True)
class DecodedInstruction:
    """A fetched word and the operand fields every handler may read.

    ``opcode``, ``x``, ``y`` and ``n`` are the four nibbles from high to low,
    ``nn`` is the low byte and ``nnn`` the low twelve bits.
    """
    raw: int
    opcode: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int


def decode(instruction: int) -> DecodedInstruction:
    word = int(instruction) & WORD_MASK
    return DecodedInstruction(
        raw=word,
        opcode=word >> 12,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & ADDRESS_MASK,
    )
