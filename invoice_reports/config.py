"""
Service configuration.

Loaded from an optional YAML file, then environment variables, then keyword
overrides.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "INVOICE_REPORTS_"
_ENV_FIELDS = {
    "MONGO_URI": "mongo_uri",
    "DATABASE": "database",
    "ENV": "environment",
    "LOG_LEVEL": "log_level",
    "DEFAULT_USER": "default_user",
}


class Settings(BaseModel):
    """Root configuration for the reporting service."""

    mongo_uri: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    database: str = Field(default="invoicing")
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Stack traces are attached to 500 responses outside production",
    )
    log_level: str = Field(default="INFO")
    default_user: str = Field(default="system", description="generatedBy when no identity is supplied")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def load(cls, config_path: Optional[str] = None, **overrides: Any) -> Settings:
        """Load settings from file, env vars, and overrides.

        Priority: overrides > env vars > config file > defaults.
        """
        data: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

        for suffix, field in _ENV_FIELDS.items():
            value = os.environ.get(ENV_PREFIX + suffix)
            if value:
                data[field] = value

        data.update(overrides)
        return cls.model_validate(data)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
