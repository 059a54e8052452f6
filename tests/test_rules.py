"""Tests for combat rules: range, line of sight, damage and death."""

from engine.grid import create_terrain
from engine.rules import apply_damage, check_death, in_weapon_range, resolve_attack
from engine.weapons import get_weapon
from models.world import Actor, ActorState, GridPosition, Terrain


def _make_actor(
    actor_id: int,
    x: int,
    y: int = 0,
    owner: int = 1,
    weapon_id: str | None = "STANDARD_BLASTER",
    health: int = 100,
) -> Actor:
    """Helper to create a test actor."""
    return Actor(
        id=actor_id,
        pos=GridPosition(x=x, y=y),
        owner=owner,
        health=health,
        weapon=get_weapon(weapon_id) if weapon_id else None,
    )


class TestApplyDamage:
    """Tests for apply_damage() and check_death()."""

    def test_reduces_health(self):
        actor = _make_actor(1, 0, health=50)
        apply_damage(actor, 10)
        assert actor.health == 40
        assert actor.state == ActorState.ALIVE

    def test_clamped_at_zero(self):
        actor = _make_actor(1, 0, health=5)
        apply_damage(actor, 10)
        assert actor.health == 0
        assert actor.state == ActorState.DEAD

    def test_exact_kill(self):
        actor = _make_actor(1, 0, health=10)
        apply_damage(actor, 10)
        assert check_death(actor)
        assert actor.state == ActorState.DEAD


class TestInWeaponRange:
    """Tests for in_weapon_range(). Row x in column 0 is x hexes from (0, 0)."""

    def test_at_max_range(self):
        assert in_weapon_range(_make_actor(1, 0), _make_actor(2, 5, owner=2))

    def test_beyond_max_range(self):
        assert not in_weapon_range(_make_actor(1, 0), _make_actor(2, 6, owner=2))

    def test_inside_min_range(self):
        sniper = _make_actor(1, 0, weapon_id="SNIPER")
        assert not in_weapon_range(sniper, _make_actor(2, 2, owner=2))
        assert in_weapon_range(sniper, _make_actor(2, 5, owner=2))

    def test_unarmed(self):
        assert not in_weapon_range(_make_actor(1, 0, weapon_id=None), _make_actor(2, 1))


class TestResolveAttack:
    """Tests for resolve_attack()."""

    def test_hit_in_range(self):
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 5, owner=2)
        assert resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert target.health == 90

    def test_out_of_range_is_noop(self):
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 6, owner=2)
        assert not resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert target.health == 100

    def test_blocked_terrain_is_noop(self):
        terrain = create_terrain(10, 10)
        terrain[2][0] = Terrain.BLOCKED
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 4, owner=2)
        assert not resolve_attack(attacker, target, terrain, [attacker, target])
        assert target.health == 100

    def test_actor_in_between_is_noop(self):
        attacker = _make_actor(1, 0)
        shield = _make_actor(3, 2, owner=2)
        target = _make_actor(2, 4, owner=2)
        assert not resolve_attack(attacker, target, create_terrain(10, 10), [attacker, shield, target])
        assert target.health == 100

    def test_dead_target_is_noop(self):
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 1, owner=2, health=0)
        target.state = ActorState.DEAD
        assert not resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert target.health == 0

    def test_self_target_is_noop(self):
        attacker = _make_actor(1, 0)
        assert not resolve_attack(attacker, attacker, create_terrain(10, 10), [attacker])
        assert attacker.health == 100

    def test_unarmed_is_noop(self):
        attacker = _make_actor(1, 0, weapon_id=None)
        target = _make_actor(2, 1, owner=2)
        assert not resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert target.health == 100

    def test_kill(self):
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 1, owner=2, health=10)
        resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert target.health == 0
        assert target.state == ActorState.DEAD

    def test_ammo_not_consumed(self):
        attacker = _make_actor(1, 0)
        target = _make_actor(2, 1, owner=2)
        resolve_attack(attacker, target, create_terrain(10, 10), [attacker, target])
        assert attacker.weapon.ammo == 100
