''' Timing pulse and reset models feeding the core '''

from bfsoc.common.hwconf import OVERSAMPLE, RESET_STAGES


class TickSource:
    ''' Oversampled (16x) and bit-rate pulses, both one step wide

    The bit-rate pulse coincides with every 16th oversampled pulse, so
    the two never drift apart.
    '''
    divisor: int
    oversample: bool
    bit: bool

    def __init__(self, divisor: int):
        if divisor < 1:
            raise ValueError(f'Tick divisor must be positive, got {divisor}')

        self.divisor = divisor
        self.reset()

    def reset(self):
        self.count = 0
        self.phase = 0
        self.oversample = False
        self.bit = False

    def step(self):
        self.count += 1
        self.oversample = False
        self.bit = False

        if self.count == self.divisor:
            self.count = 0
            self.oversample = True
            self.bit = self.phase == 0
            self.phase = (self.phase + 1) % OVERSAMPLE


class ResetSync:
    ''' Asserts with the raw reset, releases `stages` steps after it '''

    def __init__(self, stages: int = RESET_STAGES):
        self.stages = stages
        self.count = stages  # come up in reset

    def release(self):
        self.count = 0

    @property
    def reset(self) -> bool:
        return self.count > 0

    def step(self, raw: bool):
        if raw:
            self.count = self.stages
        elif self.count > 0:
            self.count -= 1
