''' Top level: components, routing and debug taps '''

import logging as lg
from dataclasses import dataclass

from bfsoc.common.hwconf import BoardConfig, LINE_IDLE
from bfsoc.runtime.clocking import TickSource, ResetSync
from bfsoc.runtime.memory import ProgramStore, DataTape
from bfsoc.runtime.uart import UartReceiver, UartTransmitter
from bfsoc.runtime.loader import ProgramLoader
import bfsoc.runtime.cpu as cpu


@dataclass
class Pins:
    rx: int = LINE_IDLE
    upload: bool = False    # route received bytes to the loader
    run: bool = False       # run-start pulse
    rst: bool = False       # raw reset, active high
    halt: bool = False      # wired out, not acted upon by the engine


@dataclass(frozen=True)
class Taps:
    pc: int
    dp: int
    cell: int
    engine_busy: bool
    loader_busy: bool
    rx_busy: bool
    tx_busy: bool


def route_rx(upload: bool, valid: bool) -> tuple[bool, bool]:
    ''' Received byte strobe for (loader, engine), never both '''
    if upload:
        return valid, False

    return False, valid


class Top:
    config: BoardConfig
    steps: int

    def __init__(self, config: BoardConfig):
        self.config = config.validate()

        self.ticks = TickSource(config.oversample_divisor())
        self.reset_sync = ResetSync(config.reset_stages)

        self.program = ProgramStore(config.program_depth)
        self.tape = DataTape(config.tape_depth)
        self.rx = UartReceiver()
        self.tx = UartTransmitter()
        self.loader = ProgramLoader(self.program)
        self.engine = cpu.Engine(cpu.Geometry(config.program_depth, config.tape_depth))

        self.steps = 0
        self.reset()

    def reset_core(self):
        self.program.reset()
        self.tape.reset()
        self.rx.reset()
        self.tx.reset()
        self.loader.reset()
        self.engine.reset()

    def reset(self):
        ''' Power-on: core reset with the synchroniser already released '''
        self.reset_core()
        self.ticks.reset()
        self.reset_sync.release()
        lg.debug('System reset')

    @property
    def tx_line(self) -> int:
        return self.tx.line

    def taps(self) -> Taps:
        return Taps(
            pc=self.engine.pc,
            dp=self.engine.dp,
            cell=self.engine.cell,
            engine_busy=self.engine.busy,
            loader_busy=self.loader.busy,
            rx_busy=self.rx.busy,
            tx_busy=self.tx.busy,
        )

    # - Clock edge - #

    def step(self, pins: Pins):
        oversample = self.ticks.oversample
        bit = self.ticks.bit

        if self.reset_sync.reset:
            self.reset_core()
        else:
            self.step_core(pins, oversample, bit)

        self.ticks.step()
        self.reset_sync.step(pins.rst)
        self.steps += 1

    def step_core(self, pins: Pins, oversample: bool, bit: bool):
        (loader_valid, engine_valid) = route_rx(pins.upload, self.rx.valid)

        inputs = cpu.Inputs(
            run=pins.run and not pins.upload,
            prog_data=self.program.observe(),
            tape_data=self.tape.observe(),
            tx_busy=self.tx.busy,
            rx_valid=engine_valid,
            rx_data=self.rx.data,
        )

        requests = self.engine.step(inputs)
        self.loader.step(pins.upload, loader_valid, self.rx.data)

        if requests.prog_read is not None:
            self.program.request_read(requests.prog_read)

        if requests.tape_read is not None:
            self.tape.request_read(requests.tape_read)

        if requests.tape_write is not None:
            (addr, value) = requests.tape_write
            self.tape.commit_write(addr, value)

        self.program.step()
        self.tape.step()
        self.tx.step(requests.tx_start, requests.tx_data, bit)
        self.rx.step(pins.rx, oversample)
