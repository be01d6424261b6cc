"""
Shock Engine
============

Owns the settings snapshot, the ramp state and the dispatcher, and turns
damage observations into shock commands.

Example:
    engine = ShockEngine(config=ShockConfig("vintageshock.json"))
    engine.reload()
    await engine.start()

    # called by the game integration
    engine.on_damage(DamageObservation.self_damage(5, current_health=15))
"""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Callable, Optional, Protocol, Tuple

from .actuator import ActuationQueue, ShockCommand
from .classifier import EventClassifier
from .config import PLACEHOLDER_DEVICE, PLACEHOLDER_TOKEN, ShockConfig, ShockSettings
from .events import (
    ClassifiedEvent,
    DamageObservation,
    DeathEvent,
    EventKind,
)
from . import ramp
from .ramp import RampState

logger = logging.getLogger(__name__)

DECAY_TICK_SECONDS = 1.0

SET_HELP = (
    "To change settings, edit the config file at:\n"
    "  {path}\n"
    "Then run reload to apply changes."
)


class Dispatcher(Protocol):
    def submit(self, command: ShockCommand) -> bool: ...
    async def start(self): ...
    async def stop(self): ...


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class DecayScheduler:
    """
    Periodic decay driver.

    Runs as a task on the event loop only while some channel is above base;
    the task ends itself once ``engine.tick()`` reports idle and is created
    again by the next ``arm()``.
    """

    def __init__(self, engine: 'ShockEngine', interval: float = DECAY_TICK_SECONDS):
        self._engine = engine
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self) -> bool:
        """Start ticking if not already. Returns False when no loop is running."""
        if self.active:
            return True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, decay scheduler not armed")
            return False
        self._task = loop.create_task(self._run())
        return True

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            if not self._engine.tick():
                logger.debug("Ramp back at base, decay scheduler idle")
                return

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None


class ShockEngine:
    """
    Classifies damage, applies cooldown and ramping, and dispatches shocks.

    ``on_damage`` may be called from host threads. Once ``start()`` has run,
    loop-bound work (decay scheduling, queue submits) is passed to the loop.
    """

    def __init__(
        self,
        settings: Optional[ShockSettings] = None,
        config: Optional[ShockConfig] = None,
        dispatcher: Optional[Dispatcher] = None,
        clock: Callable[[], float] = monotonic_ms,
        decay_interval: float = DECAY_TICK_SECONDS,
    ):
        self.config = config
        self._settings = settings or (config.settings if config else ShockSettings())
        self.state = RampState()
        self.classifier = EventClassifier()
        self.dispatcher = dispatcher if dispatcher is not None else ActuationQueue()
        self.scheduler = DecayScheduler(self, decay_interval)
        self._clock = clock
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def settings(self) -> ShockSettings:
        return self._settings

    def apply_settings(self, settings: ShockSettings):
        """Swap in a new snapshot."""
        with self._lock:
            self._settings = settings
        self._log_settings(settings)

    def reload(self) -> ShockSettings:
        """Re-read the bound config file."""
        if self.config is None:
            logger.warning("No config file bound, keeping current settings")
            return self._settings
        logger.info("Reloading config file...")
        settings = self.config.reload()
        self.apply_settings(settings)
        return settings

    async def start(self):
        self._loop = asyncio.get_running_loop()
        await self.dispatcher.start()
        with self._lock:
            rearm = ramp.needs_decay(self._settings, self.state)
        if rearm:
            self.scheduler.arm()

    async def stop(self):
        await self.scheduler.stop()
        await self.dispatcher.stop()
        self._loop = None

    # =========================================================================
    # Events
    # =========================================================================

    def on_damage(self, obs: DamageObservation, now: Optional[float] = None) -> Optional[ShockCommand]:
        """Entry point for the game integration."""
        if now is None:
            now = obs.timestamp if obs.timestamp is not None else self._clock()

        with self._lock:
            event = self.classifier.classify(obs, self._settings, self.state, now)
            if event is None:
                return None
            command, rearm = self._process(event, now)

        return self._finish(command, rearm)

    def handle_event(self, event: ClassifiedEvent, now: Optional[float] = None) -> Optional[ShockCommand]:
        """Act on an already classified event."""
        if now is None:
            now = self._clock()
        with self._lock:
            command, rearm = self._process(event, now)
        return self._finish(command, rearm)

    def tick(self, now: Optional[float] = None) -> bool:
        """One decay step. Returns True while more ticks are needed."""
        if now is None:
            now = self._clock()
        with self._lock:
            return ramp.decay_tick(self._settings, self.state, now)

    def _process(self, event: ClassifiedEvent, now: float) -> Tuple[Optional[ShockCommand], bool]:
        settings = self._settings
        if not self._trigger_enabled(settings, event):
            return None, False

        if isinstance(event, DeathEvent):
            intensity = ramp.compute_intensity(settings, self.state)
            duration = settings.duration_sec * settings.death_duration_multiplier
            logger.info(f"Triggering death shock ({intensity}% for {duration}s)")
        else:
            if self.state.in_damage_cooldown(now):
                self._log_event(f"{event.kind.value} suppressed by cooldown")
                return None, False
            self.state.last_damage_at = now
            intensity = ramp.step_intensity(settings, self.state)
            duration = ramp.step_duration(settings, self.state)
            self._log_event(f"{event.kind.value} shock: intensity={intensity}, duration={duration}s")

        self.state.last_shock_at = now
        command = ShockCommand.from_settings(settings, intensity, duration, reason=event.kind.value)
        return command, ramp.needs_decay(settings, self.state)

    def _finish(self, command: Optional[ShockCommand], rearm: bool) -> Optional[ShockCommand]:
        if command is None:
            return None
        if rearm:
            self._on_loop(self.scheduler.arm)
        self._on_loop(self.dispatcher.submit, command)
        return command

    def _on_loop(self, callback: Callable[..., object], *args):
        """
        Run ``callback`` on the engine's event loop. Host threads hand it
        over with ``call_soon_threadsafe``; before ``start()`` it runs inline.
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            callback(*args)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            callback(*args)
        else:
            loop.call_soon_threadsafe(callback, *args)

    @staticmethod
    def _trigger_enabled(settings: ShockSettings, event: ClassifiedEvent) -> bool:
        if not settings.enabled:
            return False
        if event.kind is EventKind.DEATH:
            return settings.on_player_death
        if event.kind is EventKind.DAMAGE:
            return settings.on_player_damage
        return settings.on_player_hurt_other

    # =========================================================================
    # Operator commands
    # =========================================================================

    def test_shock(self) -> Tuple[bool, str]:
        """Send one shock at base intensity and duration."""
        settings = self._settings
        if not settings.enabled:
            return False, "VintageShock is disabled in config"
        if not settings.is_configured_for_api():
            return False, "API token or Device ID not configured"

        logger.info("Testing shock...")
        command = ShockCommand.from_settings(settings, settings.intensity, settings.duration_sec, reason="test")
        self._on_loop(self.dispatcher.submit, command)
        return True, (
            f"Test shock triggered: {settings.intensity}% intensity "
            f"for {settings.duration_sec} seconds"
        )

    def status_text(self) -> str:
        s = self._settings
        token = "Configured" if s.api_token and s.api_token != PLACEHOLDER_TOKEN else "Not configured"
        device = "Configured" if s.device_id and s.device_id != PLACEHOLDER_DEVICE else "Not configured"
        with self._lock:
            intensity = ramp.compute_intensity(s, self.state)
            duration = ramp.compute_duration(s, self.state)
        return (
            "VintageShock Status:\n"
            f"  Enabled: {s.enabled}\n"
            f"  API URL: {s.api_url}\n"
            f"  API Token: {token}\n"
            f"  Device ID: {device}\n"
            f"  Intensity: {s.intensity}%\n"
            f"  Duration: {s.duration_sec} seconds\n"
            f"  Triggers:\n"
            f"    - Player Death: {s.on_player_death}\n"
            f"    - Player Damage: {s.on_player_damage}\n"
            f"    - Hurt Other: {s.on_player_hurt_other}\n"
            f"  Ramping:\n"
            f"    - Intensity: {_ramp_label(s.intensity_ramp.enabled)} (now {intensity}%)\n"
            f"    - Duration: {_ramp_label(s.duration_ramp.enabled)} (now {duration:g}s)"
        )

    def set_help(self) -> str:
        path = self.config.path if self.config and self.config.path else "vintageshock.json"
        return SET_HELP.format(path=path)

    # =========================================================================
    # Logging
    # =========================================================================

    def _log_event(self, message: str):
        level = logging.INFO if self._settings.debug else logging.DEBUG
        logger.log(level, message)

    @staticmethod
    def _log_settings(s: ShockSettings):
        logger.info(
            f"Settings => enabled={s.enabled}, death={s.on_player_death}, "
            f"damage={s.on_player_damage}, hurtOther={s.on_player_hurt_other}, "
            f"intensity={s.intensity}, durationSec={s.duration_sec}, device={s.device_id}"
        )


def _ramp_label(enabled: bool) -> str:
    return "on" if enabled else "off"
