''' Execution engine

The engine is a synchronous state machine. `transition` is a pure
function of the current state, the latched registers and the signals
sampled this step; it returns the next state, the next registers and
the requests to be presented to memories and the transmitter before
the clock edge. Memory results arrive one step after the request.
'''

import logging as lg
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

import bfsoc.common.ops as ops
from bfsoc.common.hwconf import CELL_MASK, PROGRAM_DEPTH, TAPE_DEPTH


class Halt(Exception):
    pass


class State(Enum):
    IDLE = 0
    FETCH = 1
    WAIT_FETCH = 2
    DECODE = 3
    READ_CELL = 4
    WAIT_CELL = 5
    EXECUTE = 6
    WRITE_CELL = 7
    WAIT_TX = 8
    WAIT_RX = 9
    HALT = 10


@dataclass(frozen=True)
class Registers:
    pc: int = 0
    dp: int = 0
    ir: int = 0         # latched instruction
    cell: int = 0       # latched cell value
    tx_data: int = 0    # byte held for the transmitter


@dataclass(frozen=True)
class Inputs:
    run: bool = False
    prog_data: int = 0
    tape_data: int = 0
    tx_busy: bool = False
    rx_valid: bool = False
    rx_data: int = 0


@dataclass(frozen=True)
class Requests:
    prog_read: int | None = None
    tape_read: int | None = None
    tape_write: tuple[int, int] | None = None
    tx_start: bool = False
    tx_data: int = 0


@dataclass(frozen=True)
class Geometry:
    program_depth: int = PROGRAM_DEPTH
    tape_depth: int = TAPE_DEPTH


NO_REQUESTS = Requests()

Result = tuple[State, Registers, Requests]


# - Helpers - #

def advance(r: Registers, g: Geometry) -> Registers:
    return replace(r, pc=(r.pc + 1) % g.program_depth)


def store_cell(r: Registers, g: Geometry, value: int) -> Result:
    ''' Write the current cell and move on once the write has committed '''
    value &= CELL_MASK
    r = replace(advance(r, g), cell=value)
    return State.WRITE_CELL, r, Requests(tape_write=(r.dp, value))


def transmit(r: Registers, i: Inputs, g: Geometry) -> Result:
    if i.tx_busy:
        return State.WAIT_TX, r, NO_REQUESTS

    return State.FETCH, advance(r, g), Requests(tx_start=True, tx_data=r.tx_data)


def receive(r: Registers, i: Inputs, g: Geometry) -> Result:
    if not i.rx_valid:
        return State.WAIT_RX, r, NO_REQUESTS

    return store_cell(r, g, i.rx_data)


# - States - #

def idle(r: Registers, i: Inputs, g: Geometry) -> Result:
    if i.run:
        return State.FETCH, replace(r, pc=0), NO_REQUESTS

    return State.IDLE, r, NO_REQUESTS


def fetch(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.WAIT_FETCH, r, Requests(prog_read=r.pc)


def wait_fetch(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.DECODE, replace(r, ir=i.prog_data), NO_REQUESTS


def decode(r: Registers, i: Inputs, g: Geometry) -> Result:
    if ops.is_halt(r.ir):
        return State.HALT, r, NO_REQUESTS

    if ops.opcode(r.ir) in ops.NEEDS_CELL:
        return State.READ_CELL, r, NO_REQUESTS

    return State.EXECUTE, r, NO_REQUESTS


def read_cell(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.WAIT_CELL, r, Requests(tape_read=r.dp)


def wait_cell(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.EXECUTE, replace(r, cell=i.tape_data), NO_REQUESTS


def execute(r: Registers, i: Inputs, g: Geometry) -> Result:
    op = ops.opcode(r.ir)
    handler = EXECUTORS[op]
    return handler(r, i, g)


def write_cell(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.FETCH, r, NO_REQUESTS


def wait_tx(r: Registers, i: Inputs, g: Geometry) -> Result:
    return transmit(r, i, g)


def wait_rx(r: Registers, i: Inputs, g: Geometry) -> Result:
    return receive(r, i, g)


def halt(r: Registers, i: Inputs, g: Geometry) -> Result:
    return State.HALT, r, NO_REQUESTS


# - Operations - #

def op_rgt(r: Registers, i: Inputs, g: Geometry) -> Result:
    dp = (r.dp + ops.signed_arg(r.ir)) % g.tape_depth
    return State.FETCH, advance(replace(r, dp=dp), g), NO_REQUESTS


def op_lft(r: Registers, i: Inputs, g: Geometry) -> Result:
    dp = (r.dp - ops.signed_arg(r.ir)) % g.tape_depth
    return State.FETCH, advance(replace(r, dp=dp), g), NO_REQUESTS


def op_inc(r: Registers, i: Inputs, g: Geometry) -> Result:
    return store_cell(r, g, r.cell + ops.arg(r.ir))


def op_dec(r: Registers, i: Inputs, g: Geometry) -> Result:
    return store_cell(r, g, r.cell - ops.arg(r.ir))


def op_out(r: Registers, i: Inputs, g: Geometry) -> Result:
    return transmit(replace(r, tx_data=r.cell), i, g)


def op_inp(r: Registers, i: Inputs, g: Geometry) -> Result:
    return receive(r, i, g)


def jump(r: Registers, g: Geometry, taken: bool) -> Result:
    if not taken:
        return State.FETCH, advance(r, g), NO_REQUESTS

    pc = (r.pc + ops.signed_arg(r.ir)) % g.program_depth
    return State.FETCH, replace(r, pc=pc), NO_REQUESTS


def op_jez(r: Registers, i: Inputs, g: Geometry) -> Result:
    return jump(r, g, r.cell == 0)


def op_jnz(r: Registers, i: Inputs, g: Geometry) -> Result:
    return jump(r, g, r.cell != 0)


Handler = Callable[[Registers, Inputs, Geometry], Result]

EXECUTORS: dict[int, Handler] = {
    ops.RGT: op_rgt,
    ops.LFT: op_lft,
    ops.INC: op_inc,
    ops.DEC: op_dec,
    ops.OUT: op_out,
    ops.INP: op_inp,
    ops.JEZ: op_jez,
    ops.JNZ: op_jnz,
}

HANDLERS: dict[State, Handler] = {
    State.IDLE: idle,
    State.FETCH: fetch,
    State.WAIT_FETCH: wait_fetch,
    State.DECODE: decode,
    State.READ_CELL: read_cell,
    State.WAIT_CELL: wait_cell,
    State.EXECUTE: execute,
    State.WRITE_CELL: write_cell,
    State.WAIT_TX: wait_tx,
    State.WAIT_RX: wait_rx,
    State.HALT: halt,
}


def transition(state: State, regs: Registers, inputs: Inputs, geometry: Geometry) -> Result:
    handler = HANDLERS[state]
    return handler(regs, inputs, geometry)


class Engine:
    state: State
    regs: Registers
    geometry: Geometry

    def __init__(self, geometry: Geometry = Geometry()):
        self.geometry = geometry
        self.reset()

    def reset(self):
        self.state = State.IDLE
        self.regs = Registers()

    # - Debug taps - #

    @property
    def pc(self) -> int:
        return self.regs.pc

    @property
    def dp(self) -> int:
        return self.regs.dp

    @property
    def cell(self) -> int:
        return self.regs.cell

    @property
    def busy(self) -> bool:
        return self.state not in (State.IDLE, State.HALT)

    @property
    def halted(self) -> bool:
        return self.state == State.HALT

    def debug_dump(self):
        r = self.regs
        lg.debug(
            f'{self.state.name} PC:{r.pc:02X} DP:{r.dp:X} IR:{r.ir:02X} CELL:{r.cell:02X}'
        )

    # - Clock edge - #

    def step(self, inputs: Inputs) -> Requests:
        (state, regs, requests) = transition(self.state, self.regs, inputs, self.geometry)

        if self.state == State.DECODE and state != State.HALT:
            lg.debug(f'{self.regs.pc:02X}: {ops.disassemble_word(self.regs.ir)}')

        if state == State.HALT and self.state != State.HALT:
            lg.info(f'Engine halted at PC:{regs.pc:02X}')

        self.state = state
        self.regs = regs
        return requests
