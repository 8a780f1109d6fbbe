from pathlib import Path
import logging as lg
from typing import Tuple, List
import sys

import click

from bfsoc.common.hwconf import PROGRAM_DEPTH
import bfsoc.common.ops as ops
from bfsoc.sasm.asm import CompilationItem, compile_items
from bfsoc.sasm.fpp import AsmError
import bfsoc.sasm.bf as bf


BF_SUFFIX = '.bf'


def collect_file(filepath: str | Path, force_bf: bool = False) -> CompilationItem:
    if isinstance(filepath, str):
        filepath = Path(filepath)

    lg.debug(f'Collecting file {filepath}')
    item = CompilationItem()
    item.contents = filepath.read_text()
    item.modulename = filepath.stem

    if force_bf or filepath.suffix == BF_SUFFIX:
        item.contents = bf.translate(item.contents)

    return item


def collect_files(filepaths: list[Path], force_bf: bool = False) -> list[CompilationItem]:
    return [collect_file(path, force_bf) for path in filepaths]


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--bf', 'force_bf', is_flag=True, help='Treat every source as brainfuck')
@click.option('--depth', type=int, default=PROGRAM_DEPTH, help='Program store depth')
@click.argument('sources', nargs=-1, type=Path)
@click.argument('binary', type=Path)
def compile(verbose: bool, force_bf: bool, depth: int, sources: Tuple[Path], binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info("BFSOC ASM")

    try:
        items: List[CompilationItem] = collect_files(list(sources), force_bf)
        image = compile_items(items, depth)
    except AsmError as e:
        lg.error(str(e))
        sys.exit(1)

    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(image)


@click.command()
@click.argument('binary', type=Path)
def disassemble(binary: Path):
    for line in ops.disassemble(binary.read_bytes()):
        click.echo(line)


if __name__ == "__main__":
    compile()
