import sys
from pathlib import Path
from collections import deque
import logging as lg
import traceback
from typing import Callable

import click

from bfsoc.common.hwconf import BoardConfig, load_config, fast_config
from bfsoc.runtime.uart import UartReceiver, UartTransmitter
from bfsoc.runtime.top import Top, Pins
import bfsoc.runtime.cpu as cpu


EXIT_HALT = 0
EXIT_TIMEOUT = 2
EXIT_KEYBOARD = 3
EXIT_EXEC_ERROR = 100

DEFAULT_MAX_STEPS = 2_000_000

OutputHandler = Callable[[int], None]


class Timeout(Exception):
    pass


class SerialPort:
    ''' Host end of the serial link, made of the same transceivers '''

    def __init__(self, on_output: OutputHandler | None = None):
        self.tx = UartTransmitter()
        self.rx = UartReceiver()
        self.pending: deque[int] = deque()
        self.received = bytearray()
        self.framing_errors = 0
        self.on_output = on_output

    @property
    def line(self) -> int:
        return self.tx.line

    @property
    def idle(self) -> bool:
        return not self.pending and not self.tx.busy and not self.rx.busy

    def send(self, data: bytes):
        self.pending.extend(data)

    def step(self, line: int, oversample: bool, bit: bool):
        start = not self.tx.busy and len(self.pending) > 0
        data = self.pending.popleft() if start else 0

        self.tx.step(start, data, bit)
        self.rx.step(line, oversample)

        if self.rx.valid:
            self.received.append(self.rx.data)

            if self.on_output is not None:
                self.on_output(self.rx.data)

        if self.rx.framing_error:
            self.framing_errors += 1


class Simulator:
    top: Top
    port: SerialPort
    pins: Pins

    def __init__(self, config: BoardConfig, on_output: OutputHandler | None = None):
        self.top = Top(config)
        self.port = SerialPort(on_output)
        self.pins = Pins()

    def step(self):
        oversample = self.top.ticks.oversample
        bit = self.top.ticks.bit
        line = self.top.tx_line

        self.pins.rx = self.port.line
        self.top.step(self.pins)
        self.port.step(line, oversample, bit)

        self.pins.run = False

    def run_steps(self, count: int):
        for _ in range(count):
            self.step()

    def run_while(self, condition: Callable[[], bool], max_steps: int):
        for _ in range(max_steps):
            if not condition():
                return

            self.step()

        self.top.engine.debug_dump()
        raise Timeout(f'Gave up after {max_steps} steps')

    def link_busy(self) -> bool:
        return not self.port.idle or self.top.tx.busy or self.top.rx.busy

    def upload(self, image: bytes, max_steps: int = DEFAULT_MAX_STEPS):
        lg.info(f'Uploading {len(image)} words')
        self.pins.upload = True
        self.port.send(image)
        self.run_while(lambda: self.link_busy() or self.top.loader.busy, max_steps)
        self.pins.upload = False
        self.step()

    def start(self):
        self.pins.run = True
        self.step()

    def run_until_halt(self, max_steps: int = DEFAULT_MAX_STEPS):
        self.run_while(lambda: not self.top.engine.halted, max_steps)

        # Let the last byte leave the wire
        self.run_while(self.link_busy, max_steps)
        raise cpu.Halt(bytes(self.port.received))


def write_stdout(byte: int):
    sys.stdout.buffer.write(bytes([byte]))
    sys.stdout.buffer.flush()


def execute(
    rom: bytes | None,
    data: bytes = b'',
    config: BoardConfig | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    on_output: OutputHandler | None = write_stdout
):
    sim = Simulator(config or fast_config(), on_output)

    if rom is not None:
        sim.upload(rom, max_steps)

    sim.start()
    sim.port.send(data)
    sim.run_until_halt(max_steps)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-i', '--input', 'text', default='', help='Bytes to send once running')
@click.option('--stdin', is_flag=True, help='Send standard input once running')
@click.option('--max-steps', type=int, default=DEFAULT_MAX_STEPS)
@click.option('-c', '--config', 'config_path', type=Path, help='Board TOML file')
@click.argument('rom_filename', type=Path, required=False)
def run(
    verbose: bool,
    text: str,
    stdin: bool,
    max_steps: int,
    config_path: Path | None,
    rom_filename: Path | None
):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('BFSOC')

    try:
        config = load_config(config_path) if config_path else fast_config()
        rom = rom_filename.read_bytes() if rom_filename else None
        data = sys.stdin.buffer.read() if stdin else text.encode('latin-1')
        sys.exit(execute(rom, data, config, max_steps))

    except cpu.Halt:
        lg.info('Execution halted gracefully')
        sys.exit(EXIT_HALT)

    except Timeout as e:
        lg.info(f'Execution timed out: {e}')
        sys.exit(EXIT_TIMEOUT)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        return sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        return sys.exit(EXIT_EXEC_ERROR)


if __name__ == '__main__':
    run()
