from click.testing import CliRunner

import bfsoc.common.ops as ops
import bfsoc.sasm.masm as masm
import bfsoc.runtime.emulator as emulator

import unit_utils


def test_assemble_and_disassemble(tmp_path):
    binary = tmp_path / 'out' / 'loop.bin'
    runner = CliRunner()

    result = runner.invoke(masm.compile, [str(unit_utils.find_file('testdata/loop.sasm')), str(binary)])
    assert result.exit_code == 0
    assert binary.read_bytes() == bytes([0x43, 0xC4, 0x61, 0x80, 0xFD, 0x00])

    result = runner.invoke(masm.disassemble, [str(binary)])
    assert result.exit_code == 0
    assert '01: C4  jez +4' in result.output


def test_compile_brainfuck(tmp_path):
    binary = tmp_path / 'mul.bin'
    result = CliRunner().invoke(masm.compile, [str(unit_utils.find_file('testdata/mul.bf')), str(binary)])

    assert result.exit_code == 0
    assert binary.read_bytes()[-3:] == bytes([ops.encode(ops.RGT, 1), ops.encode(ops.OUT), 0])


def test_compile_error(tmp_path):
    source = tmp_path / 'bad.sasm'
    source.write_text('rgt 0\n')
    result = CliRunner().invoke(masm.compile, [str(source), str(tmp_path / 'bad.bin')])

    assert result.exit_code == 1
    assert not (tmp_path / 'bad.bin').exists()


def test_run_default_program():
    result = CliRunner().invoke(emulator.run, ['--stdin'], input=b'ab\x00')

    assert result.exit_code == emulator.EXIT_HALT
    assert 'AB' in result.output


def test_run_timeout(tmp_path):
    rom = tmp_path / 'spin.bin'
    rom.write_bytes(bytes([ops.encode(ops.INC, 1), ops.encode(ops.JNZ, 0)]))
    result = CliRunner().invoke(emulator.run, ['--max-steps', '5000', str(rom)])

    assert result.exit_code == emulator.EXIT_TIMEOUT


def test_run_writes_raw_bytes(tmp_path):
    rom = tmp_path / 'ff.bin'
    rom.write_bytes(bytes([ops.encode(ops.DEC, 1), ops.encode(ops.OUT), ops.HLT_WORD]))
    result = CliRunner().invoke(emulator.run, [str(rom)])

    assert result.exit_code == emulator.EXIT_HALT
    assert b'\xff' in result.stdout_bytes
    assert b'\xc3\xbf' not in result.stdout_bytes
