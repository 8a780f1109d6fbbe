''' Synchronous on-chip memories

Both memories share one timing contract:

* a read requested during step T is observable from step T+1 on and
  stays stable until the next read completes;
* a write requested during step T is committed at the end of step T;
* a read and a write to the same address in the same step observe the
  written value (write-first).
'''

import logging as lg

from bfsoc.common.hwconf import CELL_WIDTH, WORD_WIDTH, PROGRAM_DEPTH, TAPE_DEPTH
from bfsoc.common.rom import default_program


class LoadError(Exception):
    pass


class LatchedMemory:
    depth: int
    width: int
    cells: list[int]
    data: int  # registered read port output

    def __init__(self, depth: int, width: int):
        self.depth = depth
        self.width = width
        self.mask = (1 << width) - 1
        self.cells = [0] * depth
        self.data = 0
        self.read_addr: int | None = None
        self.write_req: tuple[int, int] | None = None
        self.reset()

    def initial_contents(self) -> list[int]:
        return [0] * self.depth

    def reset(self):
        self.cells = self.initial_contents()
        self.data = 0
        self.read_addr = None
        self.write_req = None

    # - Ports - #

    def request_read(self, addr: int):
        self.read_addr = addr % self.depth

    def commit_write(self, addr: int, value: int):
        self.write_req = (addr % self.depth, value & self.mask)

    def observe(self) -> int:
        return self.data

    # - Clock edge - #

    def step(self):
        if self.write_req is not None:
            (addr, value) = self.write_req
            self.cells[addr] = value

        if self.read_addr is not None:
            self.data = self.cells[self.read_addr]

        self.read_addr = None
        self.write_req = None

    def peek(self, addr: int) -> int:
        ''' Debug backdoor, bypasses the ports '''
        return self.cells[addr % self.depth]


class ProgramStore(LatchedMemory):
    def __init__(self, depth: int = PROGRAM_DEPTH):
        super().__init__(depth, WORD_WIDTH)

    def initial_contents(self) -> list[int]:
        return default_program(self.depth)

    def load(self, image: bytes):
        ''' Backdoor load: the rest of the store is filled with HLT '''
        if len(image) > self.depth:
            raise LoadError(f'Image of {len(image)} words does not fit into {self.depth}')

        self.cells = list(image) + [0] * (self.depth - len(image))
        lg.debug(f'Program store loaded with {len(image)} words')


class DataTape(LatchedMemory):
    def __init__(self, depth: int = TAPE_DEPTH):
        super().__init__(depth, CELL_WIDTH)
