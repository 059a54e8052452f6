"""Combat rules: weapon range, line of sight, damage and death."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from engine.hexes import grid_to_hex, hex_distance
from engine.visibility import has_line_of_sight
from models.world import ActorState

if TYPE_CHECKING:
    from models.world import Actor, Terrain

logger = logging.getLogger(__name__)


def in_weapon_range(attacker: Actor, target: Actor) -> bool:
    """Check the hex distance between two actors against the attacker's weapon.

    An actor without a weapon has no range.
    """
    if attacker.weapon is None:
        return False
    dist = hex_distance(grid_to_hex(attacker.pos), grid_to_hex(target.pos))
    return attacker.weapon.min_range <= dist <= attacker.weapon.range


def resolve_attack(
    attacker: Actor,
    target: Actor,
    terrain: list[list[Terrain]],
    actors: list[Actor],
) -> bool:
    """Fire the attacker's weapon at the target if the shot is legal.

    Illegal shots (no weapon, dead or identical target, out of range, no
    line of sight) are silent no-ops.

    Args:
        attacker: The attacking actor.
        target: The target actor (mutated in place on a hit).
        terrain: World terrain.
        actors: Every actor in the world (occluders).

    Returns:
        True if damage was applied.
    """
    if attacker.weapon is None:
        logger.error("Actor %s has no weapon, cannot execute ATTACK order", attacker.id)
        return False

    if not target.is_alive:
        logger.info("ATTACK order: target %s is already dead", target.id)
        return False

    if attacker.id == target.id:
        logger.info("ATTACK order: actor %s cannot target itself", attacker.id)
        return False

    if not in_weapon_range(attacker, target):
        logger.info(
            "ATTACK order: target %s is out of range for %s (min %s, max %s)",
            target.id, attacker.id, attacker.weapon.min_range, attacker.weapon.max_range,
        )
        return False

    start = grid_to_hex(attacker.pos)
    end = grid_to_hex(target.pos)
    if not has_line_of_sight(start, end, terrain, actors):
        logger.info("ATTACK order: line of sight from %s to %s is blocked", attacker.id, target.id)
        return False

    apply_damage(target, attacker.weapon.damage)
    logger.info(
        "Actor %s attacked actor %s with %s for %s damage; target health now %s",
        attacker.id, target.id, attacker.weapon.name, attacker.weapon.damage, target.health,
    )
    return True


def apply_damage(actor: Actor, damage: int) -> Actor:
    """Reduce an actor's health, clamped at zero, killing it at zero.

    Args:
        actor: The actor taking damage.
        damage: Amount of damage to deal.

    Returns:
        The updated actor.
    """
    actor.health = max(0, actor.health - damage)
    if check_death(actor):
        actor.state = ActorState.DEAD
        logger.info("Actor %s has been defeated", actor.id)
    return actor


def check_death(actor: Actor) -> bool:
    """Check if an actor is at 0 health."""
    return actor.health <= 0
