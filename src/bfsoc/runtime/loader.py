''' Runtime program loader

While upload mode is held, every byte the receiver frames correctly is
written to the next program store address, starting from 0. Dropping
upload mode rewinds the address for the next session.
'''

import logging as lg
from enum import Enum

from bfsoc.runtime.memory import ProgramStore


class LoaderState(Enum):
    IDLE = 0
    WRITE = 1
    WAIT = 2


class ProgramLoader:
    state: LoaderState
    addr: int
    byte: int

    def __init__(self, store: ProgramStore):
        self.store = store
        self.reset()

    def reset(self):
        self.state = LoaderState.IDLE
        self.addr = 0
        self.byte = 0

    @property
    def busy(self) -> bool:
        return self.state != LoaderState.IDLE

    def step(self, upload: bool, valid: bool, data: int):
        if not upload:
            self.reset()
            return

        if self.state == LoaderState.IDLE:
            if valid:
                self.byte = data
                self.state = LoaderState.WRITE

        elif self.state == LoaderState.WRITE:
            self.store.commit_write(self.addr, self.byte)
            lg.debug(f'Upload [{self.addr:02X}] <- {self.byte:02X}')
            self.state = LoaderState.WAIT

        elif self.state == LoaderState.WAIT:
            self.addr = (self.addr + 1) % self.store.depth
            self.state = LoaderState.IDLE
