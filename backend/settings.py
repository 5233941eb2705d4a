"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from backend.instructions import DEFAULT_LANGUAGE
from backend.pathfinding import DEFAULT_MAX_EXPANSIONS
from backend.routing import FLOOR_CHANGE_PENALTY


@dataclass(slots=True)
class RouteSettings:
    """Routing knobs shared by the API and library callers."""

    world_path: str | None = None
    floor_change_penalty: float = FLOOR_CHANGE_PENALTY
    max_expansions: int | None = DEFAULT_MAX_EXPANSIONS
    default_language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_env(cls) -> "RouteSettings":
        """Build settings from `AISLENAV_*` variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed or is negative.
        """
        world_path = os.getenv("AISLENAV_WORLD_PATH", "").strip() or None

        raw_penalty = os.getenv("AISLENAV_FLOOR_PENALTY", "").strip()
        try:
            penalty = float(raw_penalty) if raw_penalty else FLOOR_CHANGE_PENALTY
        except ValueError as exc:
            raise ValueError("AISLENAV_FLOOR_PENALTY must be a number") from exc
        if penalty < 0:
            raise ValueError("AISLENAV_FLOOR_PENALTY must be >= 0")

        raw_budget = os.getenv("AISLENAV_MAX_EXPANSIONS", "").strip()
        try:
            budget = int(raw_budget) if raw_budget else DEFAULT_MAX_EXPANSIONS
        except ValueError as exc:
            raise ValueError("AISLENAV_MAX_EXPANSIONS must be an integer") from exc
        if budget < 0:
            raise ValueError("AISLENAV_MAX_EXPANSIONS must be >= 0")

        language = os.getenv("AISLENAV_DEFAULT_LANGUAGE", DEFAULT_LANGUAGE).strip() or DEFAULT_LANGUAGE

        return cls(
            world_path=world_path,
            floor_change_penalty=penalty,
            max_expansions=budget or None,
            default_language=language,
        )
