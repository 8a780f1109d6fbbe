''' Default program: UART echo with lower to upper case conversion '''

from bfsoc.common.ops import INP, JEZ, DEC, OUT, JNZ, INC, encode, HLT_WORD


script = [
    (INP, 0),       # 0: read a byte
    (JEZ, 7),       # 1: zero byte ends the session -> 8
    (DEC, 16),      # 2: 'a' - 32 == 'A'
    (DEC, 15),      # 3
    (DEC, 1),       # 4
    (OUT, 0),       # 5
    (JNZ, -6),      # 6: back to 0
    (JEZ, -7),      # 7: back to 0 (cell was 32)
    (INC, 10),      # 8: newline
    (OUT, 0),       # 9
]


def compile_script(items: list[tuple[int, int]], depth: int) -> list[int]:
    words = [encode(op, argument) for (op, argument) in items]
    words.extend([HLT_WORD] * (depth - len(words)))
    return words[:depth]


def default_program(depth: int) -> list[int]:
    return compile_script(script, depth)
