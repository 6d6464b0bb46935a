from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class GameSettings:
    # Delay between a defeat and the next monster appearing.
    respawn_delay_ms: int = 1000
    base_monster_hp: int = 50
    hp_per_level: int = 10
    gold_per_level: int = 5
    initial_upgrade_cost: int = 10
    upgrade_cost_factor: float = 1.5
    log_level: str = "INFO"

    @property
    def respawn_delay_s(self) -> float:
        return self.respawn_delay_ms / 1000


def project_root() -> Path:
    # clicker/config.py -> clicker/ -> project root
    return Path(__file__).resolve().parents[1]


def load_dotenv_if_present(*, root: Path | None = None) -> bool:
    """Load a repo `.env` without overriding variables already exported."""

    env_path = (root or project_root()) / ".env"
    if not env_path.exists():
        return False

    from dotenv import load_dotenv

    return load_dotenv(dotenv_path=env_path, override=False)


def _int_from_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float_from_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def settings_from_env() -> GameSettings:
    factor = _float_from_env("CLICKER_UPGRADE_COST_FACTOR", 1.5)
    if factor < 1.0:
        raise ValueError(f"CLICKER_UPGRADE_COST_FACTOR must be >= 1.0, got {factor}")

    return GameSettings(
        respawn_delay_ms=_int_from_env("CLICKER_RESPAWN_DELAY_MS", 1000),
        base_monster_hp=_int_from_env("CLICKER_BASE_MONSTER_HP", 50, minimum=1),
        hp_per_level=_int_from_env("CLICKER_HP_PER_LEVEL", 10),
        gold_per_level=_int_from_env("CLICKER_GOLD_PER_LEVEL", 5),
        initial_upgrade_cost=_int_from_env("CLICKER_INITIAL_UPGRADE_COST", 10, minimum=1),
        upgrade_cost_factor=factor,
        log_level=os.environ.get("CLICKER_LOG_LEVEL", "INFO").upper(),
    )
