"""
VintageShock
============

Turns in-game damage into OpenShock haptic feedback.

The game integration reports damage observations; the engine classifies
them, applies cooldowns and ramping, and sends shock commands to the
OpenShock API in the background.

Example:

    from vintageshock import ShockEngine, ShockConfig, DamageObservation

    engine = ShockEngine(config=ShockConfig("vintageshock.json"))
    engine.reload()
    await engine.start()

    engine.on_damage(DamageObservation.self_damage(5, current_health=15))

For mods that speak the mod protocol over WebSocket:

    from vintageshock.bridge import ShockBridge

    bridge = ShockBridge(engine)
    reply = bridge.handle_message(raw_json)
"""
__version__ = "0.1.0"

from vintageshock.config import (
    ConfigField,
    RampConfig,
    ShockConfig,
    ShockSettings,
    load_settings,
    save_settings,
    settings_from_dict,
)

from vintageshock.events import (
    ClassifiedEvent,
    DamageEvent,
    DamageObservation,
    DeathEvent,
    EventKind,
    HurtOtherEvent,
    Subject,
)

from vintageshock.ramp import (
    DAMAGE_COOLDOWN_MS,
    DEATH_COOLDOWN_MS,
    RampChannel,
    RampState,
)

from vintageshock.classifier import EventClassifier

from vintageshock.actuator import (
    ActuationQueue,
    ActuationStats,
    OpenShockClient,
    ShockCommand,
    control_url,
)

from vintageshock.engine import DecayScheduler, ShockEngine

__all__ = [
    "__version__",

    # Config
    "ConfigField",
    "RampConfig",
    "ShockConfig",
    "ShockSettings",
    "load_settings",
    "save_settings",
    "settings_from_dict",

    # Events
    "ClassifiedEvent",
    "DamageEvent",
    "DamageObservation",
    "DeathEvent",
    "EventKind",
    "HurtOtherEvent",
    "Subject",

    # Ramp
    "DAMAGE_COOLDOWN_MS",
    "DEATH_COOLDOWN_MS",
    "RampChannel",
    "RampState",

    # Classifier
    "EventClassifier",

    # Actuation
    "ActuationQueue",
    "ActuationStats",
    "OpenShockClient",
    "ShockCommand",
    "control_url",

    # Engine
    "DecayScheduler",
    "ShockEngine",
]
