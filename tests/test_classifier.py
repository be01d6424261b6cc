"""
Tests for the damage classifier.
"""
import pytest

from vintageshock.classifier import EventClassifier
from vintageshock.events import (
    DamageEvent,
    DamageObservation,
    DeathEvent,
    HurtOtherEvent,
    Subject,
)
from vintageshock.ramp import RampState

from conftest import make_settings


@pytest.fixture
def classifier():
    return EventClassifier()


@pytest.fixture
def state():
    return RampState()


class TestSelfDamage:
    """Damage taken by the local player."""

    def test_non_fatal_damage(self, classifier, state):
        obs = DamageObservation.self_damage(5, current_health=15)
        event = classifier.classify(obs, make_settings(), state, now=0)
        assert event == DamageEvent(5)

    @pytest.mark.parametrize("health,damage", [(15, 15), (15, 20), (0.5, 1), (20, 9999)])
    def test_lethal_damage_is_death(self, classifier, state, health, damage):
        obs = DamageObservation.self_damage(damage, current_health=health)
        assert classifier.classify(obs, make_settings(), state, now=0) == DeathEvent()

    def test_death_records_timestamp(self, classifier, state):
        obs = DamageObservation.self_damage(30, current_health=10)
        classifier.classify(obs, make_settings(), state, now=1234)
        assert state.last_death_at == 1234

    def test_death_cooldown_suppresses_second_death(self, classifier, state):
        settings = make_settings()
        lethal = DamageObservation.self_damage(30, current_health=10)
        assert classifier.classify(lethal, settings, state, now=0) == DeathEvent()
        assert classifier.classify(lethal, settings, state, now=2000) is None
        assert classifier.classify(lethal, settings, state, now=2001) == DeathEvent()

    def test_death_cooldown_suppresses_damage(self, classifier, state):
        settings = make_settings()
        classifier.classify(DamageObservation.self_damage(30, current_health=10), settings, state, now=0)
        respawned = DamageObservation.self_damage(2, current_health=20)
        assert classifier.classify(respawned, settings, state, now=1500) is None
        assert classifier.classify(respawned, settings, state, now=2500) == DamageEvent(2)

    @pytest.mark.parametrize("health", [0, 15, -3])
    def test_zero_damage_never_emits(self, classifier, state, health):
        obs = DamageObservation.self_damage(0, current_health=health)
        assert classifier.classify(obs, make_settings(), state, now=0) is None

    def test_dead_player_is_ignored(self, classifier, state):
        obs = DamageObservation.self_damage(5, current_health=0)
        assert classifier.classify(obs, make_settings(), state, now=0) is None
        assert state.last_death_at is None

    def test_missing_health_cannot_classify(self, classifier, state):
        obs = DamageObservation(Subject.SELF, 5)
        assert classifier.classify(obs, make_settings(), state, now=0) is None

    def test_missing_observation(self, classifier, state):
        assert classifier.classify(None, make_settings(), state, now=0) is None


class TestTriggerFlags:
    """Master and per-trigger switches."""

    def test_disabled_mod_emits_nothing(self, classifier, state):
        settings = make_settings(enabled=False)
        assert classifier.classify(DamageObservation.self_damage(5, 15), settings, state, 0) is None
        assert classifier.classify(DamageObservation.self_damage(50, 15), settings, state, 0) is None
        assert classifier.classify(DamageObservation.hurt_other(5), settings, state, 0) is None

    def test_damage_flag_off(self, classifier, state):
        settings = make_settings(on_player_damage=False)
        assert classifier.classify(DamageObservation.self_damage(5, 15), settings, state, 0) is None

    def test_death_flag_off_still_starts_cooldown(self, classifier, state):
        settings = make_settings(on_player_death=False)
        assert classifier.classify(DamageObservation.self_damage(50, 15), settings, state, 0) is None
        assert state.last_death_at == 0
        # post-mortem damage stays suppressed
        assert classifier.classify(DamageObservation.self_damage(1, 20), settings, state, 100) is None

    def test_hurt_other_flag_off(self, classifier, state):
        settings = make_settings(on_player_hurt_other=False)
        assert classifier.classify(DamageObservation.hurt_other(5), settings, state, 0) is None


class TestHurtOther:
    """Damage the player deals to something else."""

    def test_hurt_other(self, classifier, state):
        event = classifier.classify(DamageObservation.hurt_other(7.5), make_settings(), state, now=0)
        assert event == HurtOtherEvent(7.5)

    def test_hurt_other_zero_damage(self, classifier, state):
        assert classifier.classify(DamageObservation.hurt_other(0), make_settings(), state, now=0) is None

    def test_hurt_other_ignores_death_cooldown(self, classifier, state):
        state.last_death_at = 0
        event = classifier.classify(DamageObservation.hurt_other(3), make_settings(), state, now=10)
        assert event == HurtOtherEvent(3)
