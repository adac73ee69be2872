from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Tunable engine settings shared by the service, CLI and agents."""

    time_budget_ms: int = Field(default=4000, ge=1, description="Search wall-clock budget")
    max_depth: int = Field(default=8, ge=1, le=64, description="Iterative-deepening depth cap")
    book_path: Optional[str] = Field(
        default=None, description="Prebuilt book or raw opening list; bundled openings if unset"
    )
    use_book: bool = True
    seed: Optional[int] = Field(default=None, description="RNG seed for book and random agents")

    @classmethod
    def from_env(cls, prefix: str = "CHESS_AI_") -> "EngineConfig":
        """Build a config from ``CHESS_AI_*`` environment variables.

        Unset variables keep their defaults; malformed values raise
        ``pydantic.ValidationError``.
        """
        values = {}
        for name in cls.model_fields:
            raw = os.environ.get(prefix + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)
