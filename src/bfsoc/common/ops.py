# Opcodes, bits 7..5 of an instruction word
RGT = 0x00  # DP += S5 (S5 == 0 is HLT)
LFT = 0x01  # DP -= S5
INC = 0x02  # [DP] += U5
DEC = 0x03  # [DP] -= U5
OUT = 0x04  # tx <- [DP]
INP = 0x05  # [DP] <- rx
JEZ = 0x06  # if [DP] == 0: PC += S5
JNZ = 0x07  # if [DP] != 0: PC += S5

HLT_WORD = 0x00

OPCODE_SHIFT = 5
ARG_MASK = 0x1F
ARG_SIGN = 0x10

U5_MAX = 31
S5_MIN = -16
S5_MAX = 15

MNEMONICS = {
    RGT: 'rgt',
    LFT: 'lft',
    INC: 'inc',
    DEC: 'dec',
    OUT: 'out',
    INP: 'inp',
    JEZ: 'jez',
    JNZ: 'jnz',
}

SIGNED_ARG = (RGT, LFT, JEZ, JNZ)
UNSIGNED_ARG = (INC, DEC)
NEEDS_CELL = (INC, DEC, OUT, JEZ, JNZ)


def opcode(word: int) -> int:
    return (word >> OPCODE_SHIFT) & 0x07


def arg(word: int) -> int:
    return word & ARG_MASK


def signed_arg(word: int) -> int:
    a = arg(word)
    return a - (ARG_MASK + 1) if a & ARG_SIGN else a


def is_halt(word: int) -> bool:
    return word == HLT_WORD


def encode(op: int, argument: int = 0) -> int:
    if op in SIGNED_ARG:
        if argument < S5_MIN or argument > S5_MAX:
            raise ValueError(f'Signed argument {argument} out of range for {MNEMONICS[op]}')
    elif argument < 0 or argument > U5_MAX:
        raise ValueError(f'Argument {argument} out of range for {MNEMONICS[op]}')

    return ((op & 0x07) << OPCODE_SHIFT) | (argument & ARG_MASK)


def disassemble_word(word: int) -> str:
    if is_halt(word):
        return 'hlt'

    op = opcode(word)
    name = MNEMONICS[op]

    if op in SIGNED_ARG:
        return f'{name} {signed_arg(word):+d}'

    if op in UNSIGNED_ARG:
        return f'{name} {arg(word)}'

    return name


def disassemble(image: bytes) -> list[str]:
    return [
        f'{addr:02X}: {word:02X}  {disassemble_word(word)}'
        for addr, word in enumerate(image)
    ]
