''' 8-N-1 serial transceivers

Frame: start bit (0), 8 data bits LSB first, stop bit (1), line idles high.
'''

import logging as lg
from enum import Enum

from bfsoc.common.hwconf import (
    OVERSAMPLE, START_SAMPLE, DATA_BITS, LINE_IDLE, LINE_START, CELL_MASK
)


class RxState(Enum):
    IDLE = 0
    START_BIT = 1
    DATA_BITS = 2
    STOP_BIT = 3


class TxState(Enum):
    IDLE = 0
    START_BIT = 1
    DATA_BITS = 2
    STOP_BIT = 3


MID_BIT = OVERSAMPLE - 1            # ticks between two mid-bit samples, minus one
STOP_TAIL = OVERSAMPLE // 2 - 1     # ticks from mid stop bit back to idle


class UartReceiver:
    state: RxState
    data: int               # last good byte
    valid: bool             # one step pulse
    framing_error: bool     # one step pulse
    busy: bool

    def __init__(self, sync_stages: int = 2):
        self.sync_stages = sync_stages
        self.reset()

    def reset(self):
        self.state = RxState.IDLE
        self.sync = [LINE_IDLE] * self.sync_stages
        self.ticks = 0
        self.bit_index = 0
        self.shifter = 0
        self.stop_sampled = False
        self.data = 0
        self.valid = False
        self.framing_error = False
        self.busy = False

    @property
    def line(self) -> int:
        ''' Synchronised receive line '''
        return self.sync[-1]

    # - States - #

    def idle(self, line: int):
        if line == LINE_START:
            self.state = RxState.START_BIT
            self.ticks = 0
            self.busy = True

    def start_bit(self, line: int):
        if self.ticks < START_SAMPLE:
            self.ticks += 1
            return

        if line != LINE_START:
            # Glitch, not a start bit
            self.state = RxState.IDLE
            self.busy = False
            return

        self.ticks = 0
        self.bit_index = 0
        self.shifter = 0
        self.state = RxState.DATA_BITS

    def data_bits(self, line: int):
        if self.ticks < MID_BIT:
            self.ticks += 1
            return

        self.ticks = 0
        self.shifter = (self.shifter >> 1) | (line << (DATA_BITS - 1))

        if self.bit_index == DATA_BITS - 1:
            self.stop_sampled = False
            self.state = RxState.STOP_BIT
        else:
            self.bit_index += 1

    def stop_bit(self, line: int):
        if not self.stop_sampled:
            if self.ticks < MID_BIT:
                self.ticks += 1
                return

            self.ticks = 0
            self.stop_sampled = True

            if line == LINE_IDLE:
                self.data = self.shifter
                self.valid = True
                lg.debug(f'RX 0x{self.data:02X}')
            else:
                self.framing_error = True
                lg.info(f'RX framing error, dropped 0x{self.shifter:02X}')

            return

        if self.ticks < STOP_TAIL:
            self.ticks += 1
            return

        self.state = RxState.IDLE
        self.busy = False

    HANDLERS = {
        RxState.IDLE: idle,
        RxState.START_BIT: start_bit,
        RxState.DATA_BITS: data_bits,
        RxState.STOP_BIT: stop_bit,
    }

    # - Clock edge - #

    def step(self, rx: int, tick: bool):
        line = self.line

        self.valid = False
        self.framing_error = False

        if tick:
            handler = self.HANDLERS[self.state]
            handler(self, line)

        self.sync = [rx & 1] + self.sync[:-1]


class UartTransmitter:
    state: TxState
    line: int
    busy: bool

    def __init__(self):
        self.reset()

    def reset(self):
        self.state = TxState.IDLE
        self.line = LINE_IDLE
        self.busy = False
        self.shifter = 0
        self.bit_index = 0
        self.aligned = False

    # - States - #

    def start_bit(self):
        if not self.aligned:
            # Line falls on the bit tick, not at the request, so the start
            # bit lasts a full period and the receiver samples mid-bit
            # while the tick source free-runs
            self.line = LINE_START
            self.aligned = True
            return

        self.bit_index = 0
        self.line = self.shifter & 1
        self.state = TxState.DATA_BITS

    def data_bits(self):
        if self.bit_index == DATA_BITS - 1:
            self.line = LINE_IDLE
            self.state = TxState.STOP_BIT
            return

        self.bit_index += 1
        self.line = (self.shifter >> self.bit_index) & 1

    def stop_bit(self):
        self.state = TxState.IDLE
        self.busy = False

    HANDLERS = {
        TxState.START_BIT: start_bit,
        TxState.DATA_BITS: data_bits,
        TxState.STOP_BIT: stop_bit,
    }

    # - Clock edge - #

    def step(self, start: bool, data: int, tick: bool):
        if self.state == TxState.IDLE:
            if start:
                self.shifter = data & CELL_MASK
                self.aligned = False
                self.busy = True
                self.state = TxState.START_BIT
                lg.debug(f'TX 0x{self.shifter:02X}')

            return

        # Requests while busy are dropped
        if tick:
            handler = self.HANDLERS[self.state]
            handler(self)
