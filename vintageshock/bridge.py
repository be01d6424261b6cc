"""
Mod Bridge
==========

Feeds events from a game mod into the engine. The mod sends
``ModMessage`` envelopes of type ``event`` with ``event_type`` and
``event_data``; the bridge turns them into damage observations and answers
with an ``event_ack``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .engine import ShockEngine
from .events import DamageObservation, Subject
from .protocol import DamageEvents, MessageType, ModMessage

logger = logging.getLogger(__name__)

# Used for player_died events that carry no health info
DEFAULT_HEALTH = 20.0
MASSIVE_DAMAGE = 9999.0


def _number(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def observation_from_event(event_type: str, data: Dict[str, Any]) -> Optional[DamageObservation]:
    """
    Build an observation from a mod event, or None if it cannot be
    classified (unknown type, missing damage).
    """
    timestamp = _number(data, 'timestamp')

    if event_type == DamageEvents.PLAYER_DIED:
        health = _number(data, 'current_health') or _number(data, 'max_health') or DEFAULT_HEALTH
        return DamageObservation(Subject.SELF, MASSIVE_DAMAGE, health, _number(data, 'max_health'), timestamp)

    damage = _number(data, 'damage')
    if damage is None:
        return None

    if event_type == DamageEvents.PLAYER_DAMAGED:
        return DamageObservation(
            Subject.SELF,
            damage,
            current_health=_number(data, 'current_health'),
            max_health=_number(data, 'max_health'),
            timestamp=timestamp,
        )

    if event_type == DamageEvents.PLAYER_HURT_OTHER:
        return DamageObservation(Subject.OTHER, damage, timestamp=timestamp)

    return None


class ShockBridge:
    """
    Adapts mod protocol messages to ``ShockEngine.on_damage``.

    Example:
        bridge = ShockBridge(engine, game_id="vintagestory")
        reply = bridge.handle_message(raw)
        if reply:
            await websocket.send(reply)
    """

    def __init__(self, engine: ShockEngine, game_id: str = "vintagestory"):
        self.engine = engine
        self.game_id = game_id
        self.messages_received = 0

    def handle_message(self, raw: str) -> Optional[str]:
        """Handle one raw message. Returns the JSON reply, if any."""
        self.messages_received += 1
        try:
            message = ModMessage.from_json(raw)
        except (ValueError, TypeError) as e:
            logger.debug(f"Malformed mod message: {e}")
            return ModMessage(
                type=MessageType.ERROR,
                game_id=self.game_id,
                data={'error': 'malformed message'},
            ).to_json()

        if message.type == MessageType.PING:
            return ModMessage(type=MessageType.PONG, game_id=self.game_id).to_json()

        if message.type == MessageType.EVENT:
            return self._handle_event(message).to_json()

        if message.type == MessageType.ERROR:
            logger.error(f"Mod error: {message.data}")

        return None

    def _handle_event(self, message: ModMessage) -> ModMessage:
        event_type = message.data.get('event_type', '')
        event_data = message.data.get('event_data') or {}
        if not isinstance(event_data, dict):
            event_data = {}

        obs = observation_from_event(event_type, event_data)
        command = self.engine.on_damage(obs) if obs is not None else None

        data: Dict[str, Any] = {
            'original_id': message.id,
            'handled': obs is not None,
            'fired': command is not None,
        }
        if command is not None:
            data['intensity'] = command.intensity
            data['duration'] = command.duration_ms

        return ModMessage(type=MessageType.EVENT_ACK, game_id=self.game_id, mod_id=message.mod_id, data=data)


def event_message(event_type: str, event_data: Dict[str, Any], game_id: str = "vintagestory") -> str:
    """Build the raw JSON a mod would send for an event."""
    return ModMessage(
        type=MessageType.EVENT,
        game_id=game_id,
        data={'event_type': event_type, 'event_data': event_data},
    ).to_json()
