"""Weapon archetypes that actors can be equipped with."""

from config import DEFAULT_WEAPON_ID
from engine.errors import NotFoundError
from models.world import Weapon

# id -> archetype. Ranges in hexes.
WEAPON_TYPES: dict[str, Weapon] = {
    "PISTOL": Weapon(name="Pistol", min_range=0, max_range=3, damage=15, ammo=12),
    "RIFLE": Weapon(name="Assault Rifle", min_range=1, max_range=8, damage=20, ammo=30),
    "SNIPER": Weapon(name="Sniper Rifle", min_range=5, max_range=15, damage=50, ammo=5),
    "SHOTGUN": Weapon(name="Shotgun", min_range=0, max_range=2, damage=35, ammo=8),
    "ROCKET_LAUNCHER": Weapon(
        name="Rocket Launcher", min_range=2, max_range=10, damage=75, ammo=1,
    ),
    "MELEE": Weapon(name="Melee Weapon", min_range=0, max_range=1, damage=25),
    "STANDARD_BLASTER": Weapon(
        name="Standard Issue Blaster", min_range=0, max_range=5, damage=10, ammo=100,
    ),
}


def get_weapon(weapon_id: str) -> Weapon:
    """Return a fresh copy of a catalog weapon.

    Raises:
        NotFoundError: If weapon_id is not in the catalog.
    """
    weapon = WEAPON_TYPES.get(weapon_id)
    if weapon is None:
        raise NotFoundError("Weapon", weapon_id)
    return weapon.model_copy()


def default_weapon() -> Weapon:
    """The weapon every newly created actor carries."""
    return get_weapon(DEFAULT_WEAPON_ID)
