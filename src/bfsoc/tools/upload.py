''' Host side of the upload protocol

Hold the board's upload pin, run this, release the pin. Every byte is
one instruction; the board sends nothing back.
'''

import sys
import time
from pathlib import Path
import logging as lg

import click
import serial

from bfsoc.common.hwconf import BoardConfig, ConfigError, load_config


def send_image(port: serial.Serial, image: bytes, delay: float = 0.0):
    for addr, word in enumerate(image):
        port.write(bytes([word]))
        lg.debug(f'[{addr:02X}] <- {word:02X}')

        if delay:
            time.sleep(delay)

    port.flush()


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-b', '--baud', type=int, help='Overrides the board baud rate')
@click.option('--delay', type=float, default=0.0, help='Pause between bytes, seconds')
@click.option('-c', '--config', 'config_path', type=Path, help='Board TOML file')
@click.argument('port_name')
@click.argument('rom_filename', type=Path)
def upload(
    verbose: bool,
    baud: int | None,
    delay: float,
    config_path: Path | None,
    port_name: str,
    rom_filename: Path
):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('BFSOC UPLOAD')

    try:
        config = load_config(config_path) if config_path else BoardConfig().validate()
    except ConfigError as e:
        lg.error(e)
        sys.exit(1)

    image = rom_filename.read_bytes()

    if len(image) > config.program_depth:
        lg.info(f'Image has {len(image)} words, only {config.program_depth} fit')
        sys.exit(1)

    try:
        with serial.Serial(port_name, baud or config.baud_rate, timeout=1.0) as port:
            send_image(port, image, delay)

    except serial.SerialException as e:
        lg.info(f'Cannot use {port_name}: {e}')
        sys.exit(1)

    lg.info(f'{len(image)} words sent, release upload mode to run')


if __name__ == '__main__':
    upload()
