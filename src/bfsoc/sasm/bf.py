''' Brainfuck to mnemonic translation

Runs of `+`/`-` and `<`/`>` are folded into one instruction each (split
when the net count exceeds the argument range); loops become a `jez`
to just past the matching `jnz`, which jumps back to the `jez`.
'''

import logging as lg

import bfsoc.common.ops as ops
from bfsoc.common.hwconf import PROGRAM_DEPTH
from bfsoc.sasm.fpp import AsmError
import bfsoc.sasm.asm as asm


CELL_OPS = '+-'
POINTER_OPS = '<>'
BF_CHARS = '+-<>[].,'


def chunks(count: int, limit: int) -> list[int]:
    result = []

    while count > limit:
        result.append(limit)
        count -= limit

    if count > 0:
        result.append(count)

    return result


def fold(lines: list[str], run: str):
    if not run:
        return

    if run[0] in CELL_OPS:
        net = run.count('+') - run.count('-')
        mnemonic = 'inc' if net > 0 else 'dec'
        lines.extend(f'    {mnemonic} {n}' for n in chunks(abs(net), ops.U5_MAX))
    else:
        net = run.count('>') - run.count('<')
        mnemonic = 'rgt' if net > 0 else 'lft'
        lines.extend(f'    {mnemonic} {n}' for n in chunks(abs(net), ops.S5_MAX))


def same_class(a: str, b: str) -> bool:
    return (a in CELL_OPS and b in CELL_OPS) or (a in POINTER_OPS and b in POINTER_OPS)


def translate(source: str) -> str:
    lines = ['// translated from brainfuck']
    loops: list[int] = []
    loop_count = 0
    run = ''

    for ch in (c for c in source if c in BF_CHARS):
        if run and same_class(run[0], ch):
            run += ch
            continue

        fold(lines, run)
        run = ''

        if ch in CELL_OPS or ch in POINTER_OPS:
            run = ch

        elif ch == '.':
            lines.append('    out')

        elif ch == ',':
            lines.append('    inp')

        elif ch == '[':
            loops.append(loop_count)
            lines.append(f'loop_{loop_count}:')
            lines.append(f'    jez &end_{loop_count}')
            loop_count += 1

        elif ch == ']':
            if not loops:
                raise AsmError('Unbalanced ]')

            n = loops.pop()
            lines.append(f'    jnz &loop_{n}')
            lines.append(f'end_{n}:')

    fold(lines, run)

    if loops:
        raise AsmError(f'{len(loops)} unclosed [')

    lines.append('    hlt')
    lg.debug(f'{loop_count} loops translated')
    return '\n'.join(lines) + '\n'


def compile_string(modulename: str, source: str, depth: int = PROGRAM_DEPTH) -> bytes:
    return asm.compile_string(modulename, translate(source), depth)
