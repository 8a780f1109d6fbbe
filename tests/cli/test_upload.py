import serial
from click.testing import CliRunner

import bfsoc.common.ops as ops
import bfsoc.tools.upload as upload


def test_send_image():
    image = bytes([0x43, 0xC4, 0x61, 0x80, 0xFD, 0x00])

    with serial.serial_for_url('loop://', timeout=1.0) as port:
        upload.send_image(port, image)
        assert port.read(len(image)) == image


def test_image_too_big_for_board(tmp_path):
    board = tmp_path / 'board.toml'
    board.write_text('[board]\nprogram_depth = 16\n')
    rom = tmp_path / 'big.bin'
    rom.write_bytes(bytes([ops.encode(ops.INC, 1)] * 20))

    result = CliRunner().invoke(upload.upload, ['-c', str(board), 'loop://', str(rom)])
    assert result.exit_code == 1


def test_bad_board_config(tmp_path):
    board = tmp_path / 'board.toml'
    board.write_text('[board]\nprogram_depth = 4\n')
    rom = tmp_path / 'one.bin'
    rom.write_bytes(bytes([ops.HLT_WORD]))

    result = CliRunner().invoke(upload.upload, ['-c', str(board), 'loop://', str(rom)])
    assert result.exit_code == 1
