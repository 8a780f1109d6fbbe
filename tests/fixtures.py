# type: ignore
import pytest

from bfsoc.common.hwconf import fast_config
from bfsoc.runtime.emulator import Simulator


@pytest.fixture
def with_config():
    yield fast_config()


@pytest.fixture
def with_sim(with_config):
    yield Simulator(with_config, on_output=None)
