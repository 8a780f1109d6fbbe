import pytest

import bfsoc.sasm.asm as asm
from bfsoc.sasm.fpp import AsmError
from bfsoc.common.rom import default_program

import unit_utils


LOOP_IMAGE = bytes([0x43, 0xC4, 0x61, 0x80, 0xFD, 0x00])


def test_loop_with_labels():
    binary = asm.compile_string('loop', unit_utils.load_file('testdata/loop.sasm'))
    assert binary == LOOP_IMAGE


def test_literal_offsets():
    source = '''
        inc 3
        jez +4
        dec 1
        out
        jnz -3
        hlt
    '''
    assert asm.compile_string('literal', source) == LOOP_IMAGE


def test_echo_matches_power_on_program():
    binary = asm.compile_string('echo', unit_utils.load_file('testdata/echo.sasm'))
    assert list(binary) == default_program(32)[:len(binary)]
    assert len(binary) == 11


def test_pointer_ops_and_raw_bytes():
    source = '''
        rgt 1   // 0x01
        rgt -1  // 0x1F
        lft 15
        lft 0
        inp
        .byte 0xA0
        .byte 7
    '''
    assert asm.compile_string('misc', source) == bytes([0x01, 0x1F, 0x2F, 0x20, 0xA0, 0xA0, 0x07])


def test_qualified_labels():
    first = asm.make_item('first', 'top: inc 1\n')
    second = asm.make_item('second', 'jnz &first::top\n')
    assert asm.compile_items([first, second]) == bytes([0x41, 0xFF])


def test_rgt_zero_rejected():
    with pytest.raises(AsmError):
        asm.compile_string('bad', 'rgt 0')


@pytest.mark.parametrize('source', [
    'inc 32',
    'dec -1',
    'rgt 16',
    'lft -17',
    'jez 16',
    '.byte 256',
])
def test_argument_range(source):
    with pytest.raises(AsmError):
        asm.compile_string('bad', source)


def test_jump_too_far():
    source = 'start:\n' + 'inc 1\n' * 17 + 'jnz &start\n'

    with pytest.raises(AsmError, match='too far'):
        asm.compile_string('far', source)


def test_unknown_label():
    with pytest.raises(AsmError, match='Unknown label'):
        asm.compile_string('bad', 'jez &nowhere')


def test_duplicate_label():
    with pytest.raises(AsmError, match='Duplicate'):
        asm.compile_string('bad', 'a: out\na: out\n')


def test_syntax_error():
    with pytest.raises(AsmError, match='syntax'):
        asm.compile_string('bad', 'inc 1\nfrobnicate\n')


def test_program_too_big():
    with pytest.raises(AsmError, match='does not fit'):
        asm.compile_string('big', 'out\n' * 33)

    assert len(asm.compile_string('big', 'out\n' * 33, depth=64)) == 33


def test_item_namespace_is_module_name():
    item = asm.make_item('main', 'inc 1\nbogus\n')
    assert item.namespace() == 'main'

    with pytest.raises(AsmError, match=r'^main:\d+: syntax error'):
        asm.compile_items([item])
