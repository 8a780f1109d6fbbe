import pytest

import bfsoc.common.ops as ops


def test_fields():
    word = 0xFD
    assert ops.opcode(word) == ops.JNZ
    assert ops.arg(word) == 0x1D
    assert ops.signed_arg(word) == -3


def test_signed_range():
    assert [ops.signed_arg(ops.encode(ops.RGT, n)) for n in (-16, -1, 1, 15)] == [-16, -1, 1, 15]


def test_encode_checks_range():
    with pytest.raises(ValueError):
        ops.encode(ops.INC, 32)

    with pytest.raises(ValueError):
        ops.encode(ops.JEZ, -17)


def test_halt_word():
    assert ops.is_halt(0x00)
    assert not ops.is_halt(ops.encode(ops.LFT, 0))
    assert ops.encode(ops.RGT, 0) == ops.HLT_WORD


def test_disassemble():
    listing = ops.disassemble(bytes([0x43, 0xC4, 0xFD, 0x80, 0x00]))
    assert listing == [
        '00: 43  inc 3',
        '01: C4  jez +4',
        '02: FD  jnz -3',
        '03: 80  out',
        '04: 00  hlt',
    ]
