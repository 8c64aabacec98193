from __future__ import annotations
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "PAGELANG_"


class Settings(BaseModel):
    """Compiler/evaluator settings, overridable through PAGELANG_* environment variables."""
    model_config = ConfigDict(frozen=True)

    max_call_depth: int = Field(default=64, ge=1, le=200, description="Maximum nested macro calls per render")
    strict_macros: bool = Field(default=True, description="Reject calls to unknown macros at compile time")
    source_encoding: str = Field(default="utf-8", min_length=1)

    @field_validator("strict_macros", mode="before")
    @classmethod
    def coerce_flag(cls, v):
        if isinstance(v, str):
            flag = v.strip().lower()
            if flag in ("1", "true", "yes", "on"):
                return True
            if flag in ("0", "false", "no", "off"):
                return False
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)
