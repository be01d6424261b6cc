"""
Ramp state for intensity and duration.

Each trigger steps a channel toward its ceiling; a periodic tick decays it
back toward the configured base. The two channels are independent and
either may be disabled.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .config import RampConfig, ShockSettings

DAMAGE_COOLDOWN_MS = 500
DEATH_COOLDOWN_MS = 2000


@dataclass
class RampChannel:
    """Ramped value for one channel. ``current`` is None while at base."""

    current: Optional[float] = None
    last_decay_tick: Optional[float] = None

    @staticmethod
    def ceiling(base: float, config: RampConfig) -> float:
        return max(config.max_value, base)

    def value(self, base: float, config: RampConfig) -> float:
        """Current ramped value without stepping."""
        if not config.enabled or self.current is None:
            return base
        return min(self.ceiling(base, config), max(self.current, base))

    def step(self, base: float, config: RampConfig) -> float:
        """Apply one trigger and return the new value."""
        if not config.enabled:
            return base
        current = max(self.current if self.current is not None else base, base)
        current = min(self.ceiling(base, config), current + config.step_amount)
        self.current = current
        return current

    def is_above_base(self, base: float, config: RampConfig) -> bool:
        return config.enabled and self.current is not None and self.current > base

    def tick(self, base: float, config: RampConfig, now: float) -> bool:
        """
        Decay toward ``base``.

        The first tick after the timer was disarmed only primes it. Returns
        True while the channel still needs ticks.
        """
        if not self.is_above_base(base, config):
            self.last_decay_tick = None
            return False

        if self.last_decay_tick is None:
            self.last_decay_tick = now
            return True

        if now - self.last_decay_tick >= config.decay_interval_ms:
            self.current = max(base, self.current - config.decay_amount)
            self.last_decay_tick = now
            if self.current <= base:
                self.disarm(base)
                return False

        return True

    def disarm(self, value: Optional[float] = None):
        self.current = value
        self.last_decay_tick = None

    def reset(self):
        self.disarm(None)


@dataclass
class RampState:
    """
    Mutable per-session state shared by the classifier, the engine and the
    decay tick. Callers serialize access; the engine holds a lock around it.
    """

    intensity: RampChannel = field(default_factory=RampChannel)
    duration: RampChannel = field(default_factory=RampChannel)
    last_shock_at: Optional[float] = None
    last_damage_at: Optional[float] = None
    last_death_at: Optional[float] = None

    def in_damage_cooldown(self, now: float) -> bool:
        return self.last_damage_at is not None and now - self.last_damage_at <= DAMAGE_COOLDOWN_MS

    def in_death_cooldown(self, now: float) -> bool:
        return self.last_death_at is not None and now - self.last_death_at <= DEATH_COOLDOWN_MS

    def reset(self):
        self.intensity.reset()
        self.duration.reset()
        self.last_shock_at = None
        self.last_damage_at = None
        self.last_death_at = None


def _clamp_intensity(value: float) -> int:
    return max(0, min(100, int(round(value))))


def compute_intensity(settings: ShockSettings, state: RampState) -> int:
    """Intensity to send right now, without stepping."""
    return _clamp_intensity(state.intensity.value(settings.intensity, settings.intensity_ramp))


def compute_duration(settings: ShockSettings, state: RampState) -> float:
    """Duration in seconds to send right now, without stepping."""
    return state.duration.value(settings.duration_sec, settings.duration_ramp)


def step_intensity(settings: ShockSettings, state: RampState) -> int:
    return _clamp_intensity(state.intensity.step(settings.intensity, settings.intensity_ramp))


def step_duration(settings: ShockSettings, state: RampState) -> float:
    return state.duration.step(settings.duration_sec, settings.duration_ramp)


def needs_decay(settings: ShockSettings, state: RampState) -> bool:
    """True while at least one ramping channel sits above its base."""
    return (
        state.intensity.is_above_base(settings.intensity, settings.intensity_ramp)
        or state.duration.is_above_base(settings.duration_sec, settings.duration_ramp)
    )


def decay_tick(settings: ShockSettings, state: RampState, now: float) -> bool:
    """Run one decay tick on both channels. Returns True if more ticks are needed."""
    intensity_active = state.intensity.tick(settings.intensity, settings.intensity_ramp, now)
    duration_active = state.duration.tick(settings.duration_sec, settings.duration_ramp, now)
    return intensity_active or duration_active
