"""Runtime settings for the HTTP server.

Values come from ``GAMBIT_*`` environment variables; command-line flags in
``gambit.cli.main`` take precedence.
"""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


Difficulty = Literal["easy", "medium", "hard"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    log_level: LogLevel = "INFO"
    default_difficulty: Difficulty = "medium"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        values = {}
        for name in cls.model_fields:
            key = f"GAMBIT_{name.upper()}"
            if key in env:
                values[name] = env[key]
        return cls(**values)
