"""
Damage Events
=============

Inputs and outputs of the classifier: the raw observation reported by the
game and the small set of trigger categories it maps to.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class Subject(Enum):
    """Who the observation is about."""

    SELF = "self"    # the local player took damage
    OTHER = "other"  # the local player caused damage to something else


class EventKind(Enum):
    """Trigger categories."""

    DAMAGE = "damage"
    HURT_OTHER = "hurt_other"
    DEATH = "death"


@dataclass(frozen=True)
class DamageObservation:
    """A single damage report from the host. Timestamps are milliseconds."""

    subject: Subject
    damage: float
    current_health: Optional[float] = None
    max_health: Optional[float] = None
    timestamp: Optional[float] = None

    @property
    def is_self(self) -> bool:
        return self.subject is Subject.SELF

    @classmethod
    def self_damage(
        cls,
        damage: float,
        current_health: Optional[float],
        max_health: Optional[float] = None,
        timestamp: Optional[float] = None,
    ) -> 'DamageObservation':
        return cls(Subject.SELF, damage, current_health, max_health, timestamp)

    @classmethod
    def hurt_other(cls, damage: float, timestamp: Optional[float] = None) -> 'DamageObservation':
        return cls(Subject.OTHER, damage, timestamp=timestamp)


@dataclass(frozen=True)
class DamageEvent:
    """The player took non-fatal damage."""

    amount: float
    kind: ClassVar[EventKind] = EventKind.DAMAGE


@dataclass(frozen=True)
class HurtOtherEvent:
    """The player damaged another entity."""

    amount: float
    kind: ClassVar[EventKind] = EventKind.HURT_OTHER


@dataclass(frozen=True)
class DeathEvent:
    """The incoming damage kills the player."""

    kind: ClassVar[EventKind] = EventKind.DEATH


ClassifiedEvent = Union[DamageEvent, HurtOtherEvent, DeathEvent]
