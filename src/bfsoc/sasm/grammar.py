# type: ignore
''' Mnemonic grammar '''

import pyparsing as pp

import bfsoc.common.ops as ops
from bfsoc.sasm.fpp import FPP


id = pp.Word(pp.alphas + '_', pp.alphanums + '_')
comment = pp.Suppress(pp.Regex(r'//[^\n]*'))

label = (id + pp.Suppress(':')).setParseAction(lambda r: (FPP.on_label, r[0]))

hex_const = pp.Regex('0x[0-9a-fA-F]+').setParseAction(lambda r: int(r[0], 16))
dec_const = pp.Regex('[0-9]+').setParseAction(lambda r: int(r[0]))
us_const = hex_const ^ dec_const
s_const = pp.Regex('[+-]?[0-9]+').setParseAction(lambda r: int(r[0]))

refname = pp.Optional(id + pp.Suppress('::')) + id
# Join into [namespace, name] or [name]
refname.setParseAction(lambda r: [r])

ref = pp.Suppress('&') + refname
target = ref ^ s_const


def g_cmd(literal, op):
    return pp.Keyword(literal).setParseAction(lambda _: (FPP.issue_op, (op, 0)))


def g_cmd_u(literal, op):
    return (pp.Keyword(literal) + us_const) \
        .setParseAction(lambda r: (FPP.issue_op, (op, r[1])))


def g_cmd_ptr(literal, op):
    return (pp.Keyword(literal) + s_const) \
        .setParseAction(lambda r: (FPP.issue_pointer, (op, r[1])))


def g_cmd_jump(literal, op):
    return (pp.Keyword(literal) + target) \
        .setParseAction(lambda r: (FPP.issue_jump, (op, r[1])))


rgt_cmd = g_cmd_ptr('rgt', ops.RGT)
lft_cmd = g_cmd_ptr('lft', ops.LFT)
inc_cmd = g_cmd_u('inc', ops.INC)
dec_cmd = g_cmd_u('dec', ops.DEC)
out_cmd = g_cmd('out', ops.OUT)
inp_cmd = g_cmd('inp', ops.INP)
jez_cmd = g_cmd_jump('jez', ops.JEZ)
jnz_cmd = g_cmd_jump('jnz', ops.JNZ)
hlt_cmd = pp.Keyword('hlt').setParseAction(lambda _: (FPP.issue_halt, None))

byte_cmd = (pp.Keyword('.byte') + us_const) \
    .setParseAction(lambda r: (FPP.issue_byte, r[1]))

asm_cmd = rgt_cmd \
    ^ lft_cmd \
    ^ inc_cmd \
    ^ dec_cmd \
    ^ out_cmd \
    ^ inp_cmd \
    ^ jez_cmd \
    ^ jnz_cmd \
    ^ hlt_cmd \
    ^ byte_cmd

program = pp.ZeroOrMore(label ^ asm_cmd)
program.ignore(comment)
