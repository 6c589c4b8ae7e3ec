# formdoc/config.py
from __future__ import annotations
import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator
from .errors import ConfigError

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

class Settings(BaseModel):
    log_level: str = "INFO"
    font_name: str = "Calibri"
    font_size: float = 11
    max_convert_iterations: int = 10000
    default_title: str = "Document"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LEVELS:
            raise ValueError(f"unknown log level {v}")
        return v

    @field_validator("font_size", "max_convert_iterations")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v

# env var -> Settings field
ENV_KEYS = {
    "FORMDOC_LOG_LEVEL": "log_level",
    "FORMDOC_FONT_NAME": "font_name",
    "FORMDOC_FONT_SIZE": "font_size",
    "FORMDOC_MAX_CONVERT_ITERATIONS": "max_convert_iterations",
    "FORMDOC_DEFAULT_TITLE": "default_title",
}

def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path)
    raw = {field: os.getenv(env) for env, field in ENV_KEYS.items()}
    try:
        return Settings(**{k: v for k, v in raw.items() if v not in (None, "")})
    except ValidationError as e:
        raise ConfigError(f"Invalid formdoc settings: {e}") from e
