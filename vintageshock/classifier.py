"""
Event Classifier
================

Maps a raw damage observation to at most one trigger event.
"""
from __future__ import annotations

import logging
from typing import Optional

from .config import ShockSettings
from .events import (
    ClassifiedEvent,
    DamageEvent,
    DamageObservation,
    DeathEvent,
    HurtOtherEvent,
)
from .ramp import RampState

logger = logging.getLogger(__name__)


class EventClassifier:
    """
    Decides whether an observation is a death, plain damage, damage dealt to
    another entity, or nothing.

    A detected death starts the death cooldown even when the death trigger
    itself is switched off, so damage processed after the player died (or
    while respawning) is never reported as fresh damage.
    """

    def classify(
        self,
        obs: Optional[DamageObservation],
        settings: ShockSettings,
        state: RampState,
        now: float,
    ) -> Optional[ClassifiedEvent]:
        if obs is None or not settings.enabled:
            return None

        if obs.is_self:
            return self._classify_self(obs, settings, state, now)
        return self._classify_hurt_other(obs, settings)

    def _classify_self(
        self,
        obs: DamageObservation,
        settings: ShockSettings,
        state: RampState,
        now: float,
    ) -> Optional[ClassifiedEvent]:
        if obs.current_health is None:
            logger.debug("No health info on observation, cannot classify")
            return None

        current = obs.current_health
        damage = obs.damage
        is_alive = current > 0
        will_die = current - damage <= 0
        in_cooldown = state.in_death_cooldown(now)

        logger.debug(
            f"Player damage: current={current}, damage={damage}, "
            f"isAlive={is_alive}, willDie={will_die}, inCooldown={in_cooldown}"
        )

        if is_alive and will_die and not in_cooldown:
            state.last_death_at = now
            logger.info(f"Player death detected. Current HP: {current}, Damage: {damage}")
            if not settings.on_player_death:
                return None
            return DeathEvent()

        if is_alive and damage > 0 and not in_cooldown:
            if not settings.on_player_damage:
                return None
            return DamageEvent(damage)

        logger.debug(f"Ignoring damage - isAlive={is_alive}, inCooldown={in_cooldown}")
        return None

    def _classify_hurt_other(
        self,
        obs: DamageObservation,
        settings: ShockSettings,
    ) -> Optional[ClassifiedEvent]:
        if obs.damage > 0 and settings.on_player_hurt_other:
            return HurtOtherEvent(obs.damage)
        return None
