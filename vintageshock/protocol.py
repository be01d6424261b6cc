"""
Mod Communication Protocol
==========================

JSON envelope exchanged with the game mod over the WebSocket. Only the
messages a damage feed needs: keepalive, events and their acks, errors.
"""
from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict


class MessageType(Enum):
    """Types of messages in the protocol."""

    PING = "ping"
    PONG = "pong"

    # Mod -> engine
    EVENT = "event"
    EVENT_ACK = "event_ack"

    ERROR = "error"


@dataclass
class ModMessage:
    """Envelope for every message."""

    type: MessageType
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: float = field(default_factory=time.time)
    game_id: str = ""
    mod_id: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> 'ModMessage':
        """
        Deserialize from JSON string.

        Raises ValueError for anything that is not a well-formed envelope.
        """
        d = json.loads(json_str)
        if not isinstance(d, dict) or 'type' not in d:
            raise ValueError("message must be an object with a 'type'")
        known = {'type', 'id', 'timestamp', 'game_id', 'mod_id', 'data'}
        d = {k: v for k, v in d.items() if k in known}
        d['type'] = MessageType(d['type'])
        if not isinstance(d.get('data', {}), dict):
            raise ValueError("'data' must be an object")
        return cls(**d)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        d = asdict(self)
        d['type'] = self.type.value
        return d


class DamageEvents:
    """Event types a mod can emit."""

    PLAYER_DAMAGED = "player_damaged"
    PLAYER_HURT_OTHER = "player_hurt_other"
    PLAYER_DIED = "player_died"
