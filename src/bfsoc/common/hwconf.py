from dataclasses import dataclass, fields
from pathlib import Path
import tomllib


PROGRAM_DEPTH    = 32           # instruction words in the program store
MIN_PROGRAM_DEPTH = 16          # room for the default program
TAPE_DEPTH       = 16           # cells on the data tape
CELL_WIDTH       = 8
CELL_MASK        = (1 << CELL_WIDTH) - 1
WORD_WIDTH       = 8            # opcode:3 + argument:5

OVERSAMPLE       = 16           # oversampled ticks per serial bit
START_SAMPLE     = 7            # start bit confirmed on this oversampled tick
DATA_BITS        = 8

CLOCK_FREQ       = 50_000_000   # reference board clock, Hz
BAUD_RATE        = 115_200
RESET_STAGES     = 4            # steps the synchronised reset outlives the raw one

LINE_IDLE        = 1
LINE_START       = 0


class ConfigError(Exception):
    pass


@dataclass
class BoardConfig:
    clock_freq: int = CLOCK_FREQ
    baud_rate: int = BAUD_RATE
    program_depth: int = PROGRAM_DEPTH
    tape_depth: int = TAPE_DEPTH
    reset_stages: int = RESET_STAGES

    def validate(self):
        if self.program_depth < MIN_PROGRAM_DEPTH:
            raise ConfigError(f'Program store needs at least {MIN_PROGRAM_DEPTH} words')

        if self.tape_depth < 1:
            raise ConfigError('Tape depth must be positive')

        if self.baud_rate < 1:
            raise ConfigError(f'Bad baud rate {self.baud_rate}')

        if self.clock_freq < self.baud_rate * OVERSAMPLE:
            raise ConfigError(
                f'Clock {self.clock_freq} Hz is too slow for {self.baud_rate} baud'
            )

        if self.reset_stages < 1:
            raise ConfigError('Reset synchroniser needs at least one stage')

        return self

    def oversample_divisor(self) -> int:
        return self.clock_freq // (self.baud_rate * OVERSAMPLE)

    def steps_per_bit(self) -> int:
        return self.oversample_divisor() * OVERSAMPLE


def set_param(config: BoardConfig, key: str, value):
    if key not in {f.name for f in fields(config)}:
        raise ConfigError(f'Unknown board parameter {key}')

    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f'Board parameter {key} must be an integer')

    setattr(config, key, value)


def fast_config(**kwargs) -> BoardConfig:
    ''' One oversampled tick per step, for simulation '''
    config = BoardConfig(clock_freq=OVERSAMPLE, baud_rate=1)
    for key, value in kwargs.items():
        set_param(config, key, value)

    return config.validate()


def load_config(path: Path) -> BoardConfig:
    data = tomllib.loads(path.read_text())
    board = data.get('board', {})
    config = BoardConfig()

    for key, value in board.items():
        set_param(config, key, value)

    return config.validate()
