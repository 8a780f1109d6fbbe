import logging as lg
from typing import List, Tuple, Dict, Any

import bfsoc.common.ops as ops

Tokens = List[Any]


class AsmError(Exception):
    pass


class FPP:
    ''' First pass processor '''
    cmd_list: List[Tuple[str, int | Tuple[int, int, str]]]
    label_dict: Dict[str, int]

    def __init__(self):
        self.cmd_list = list()
        self.offset = 0
        self.namespace = "<global>"
        self.label_dict = dict()

    def get_qualified_name(self, name: str, namespace: str | None = None):
        if namespace is None:
            namespace = self.namespace

        return namespace + '::' + name

    def resolve_name(self, tokens: Tokens):
        if len(tokens) == 1:
            # Unqualified
            return self.get_qualified_name(tokens[0])

        # Qualified: namespace, name
        return self.get_qualified_name(tokens[1], tokens[0])

    # Handlers
    def issue_word(self, word: int):
        self.cmd_list.append(('word', word))
        self.offset += 1

    def issue_op(self, args: Tuple[int, int]):
        (op, argument) = args

        try:
            word = ops.encode(op, argument)
        except ValueError as e:
            raise AsmError(f'@{self.offset:02X}: {e}') from e

        lg.debug(f'Issuing {ops.disassemble_word(word)} @ 0x{self.offset:X}')
        self.issue_word(word)

    def issue_pointer(self, args: Tuple[int, int]):
        (op, argument) = args

        if op == ops.RGT and argument == 0:
            raise AsmError(f'@{self.offset:02X}: rgt 0 would encode hlt')

        self.issue_op(args)

    def issue_halt(self, _):
        self.issue_word(ops.HLT_WORD)

    def issue_byte(self, word: int):
        if word < 0 or word > 0xFF:
            raise AsmError(f'@{self.offset:02X}: .byte {word} out of range')

        self.issue_word(word)

    def issue_jump(self, args: Tuple[int, Any]):
        (op, target) = args

        if isinstance(target, int):
            self.issue_op((op, target))
            return

        labelname = self.resolve_name(target)
        lg.debug(f'Ref {labelname}')
        self.cmd_list.append(('ref', (self.offset, op, labelname)))
        self.offset += 1

    def on_label(self, labelname: str):
        qlabelname = self.get_qualified_name(labelname)

        if qlabelname in self.label_dict:
            raise AsmError(f'Duplicate label {qlabelname}')

        self.label_dict[qlabelname] = self.offset
        lg.debug(f'Label {qlabelname} @ 0x{self.offset:X}')
