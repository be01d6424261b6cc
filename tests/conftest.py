import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dataclasses import replace
from typing import List

import pytest

from vintageshock.config import RampConfig, ShockSettings
from vintageshock.engine import ShockEngine


class RecordingDispatcher:
    """Collects submitted commands instead of sending them."""

    def __init__(self):
        self.commands = []
        self.started = False
        self.stopped = False

    def submit(self, command) -> bool:
        self.commands.append(command)
        return True

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


def make_settings(**overrides) -> ShockSettings:
    base = ShockSettings(
        enabled=True,
        api_token="token-123",
        device_id="device-abc",
        intensity=30,
        duration_sec=1.0,
        on_player_death=True,
        on_player_damage=True,
        on_player_hurt_other=True,
    )
    return replace(base, **overrides)


def intensity_ramp(**overrides) -> RampConfig:
    defaults = dict(enabled=True, step_percent=10.0, decay_percent=5.0,
                    decay_interval_sec=1.0, max_value=100.0)
    defaults.update(overrides)
    return RampConfig(**defaults)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000.0)


@pytest.fixture
def engine(dispatcher, clock) -> ShockEngine:
    return ShockEngine(settings=make_settings(), dispatcher=dispatcher, clock=clock)
