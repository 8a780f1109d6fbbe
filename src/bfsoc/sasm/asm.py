import logging as lg

import bfsoc.common.ops as ops
from bfsoc.common.hwconf import PROGRAM_DEPTH
from bfsoc.sasm.fpp import FPP, AsmError
import bfsoc.sasm.grammar as grammar

import pyparsing as pp


class CompilationItem:
    modulename: str
    contents: str

    def namespace(self) -> str:
        return self.modulename


def make_item(modulename: str, contents: str) -> CompilationItem:
    item = CompilationItem()
    item.modulename = modulename
    item.contents = contents
    return item


def compile_items(compile_items: list[CompilationItem], depth: int = PROGRAM_DEPTH) -> bytes:
    # First pass
    first_pass = FPP()

    for compile_item in compile_items:
        lg.info("Processing {0}".format(compile_item.namespace()))
        first_pass.namespace = compile_item.namespace()

        try:
            actions = grammar.program.parse_string(compile_item.contents, parse_all=True)
        except pp.ParseException as e:
            raise AsmError(f'{compile_item.namespace()}:{e.lineno}: syntax error at "{e.line}"') from e

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)

    # Second pass
    image = bytearray()

    for (t, d) in first_pass.cmd_list:
        if t == 'word':
            image.append(d)  # type: ignore

        if t == 'ref':
            (ref_offset, op, labelname) = d  # type: ignore

            if labelname not in first_pass.label_dict:
                raise AsmError(f'Unknown label {labelname}')

            offset = first_pass.label_dict[labelname] - ref_offset

            try:
                image.append(ops.encode(op, offset))
            except ValueError as e:
                raise AsmError(f'@{ref_offset:02X}: jump to {labelname} too far ({offset:+d})') from e

    if len(image) > depth:
        raise AsmError(f'Program of {len(image)} words does not fit into {depth}')

    lg.info(f'{len(image)} words assembled')
    return bytes(image)


def compile_string(modulename: str, contents: str, depth: int = PROGRAM_DEPTH) -> bytes:
    return compile_items([make_item(modulename, contents)], depth)
