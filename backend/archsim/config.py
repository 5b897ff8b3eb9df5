"""Application configuration via pydantic-settings."""

from __future__ import annotations

import json
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "ARCHSIM_", "case_sensitive": False}

    # Traffic
    default_traffic_load: float = 1000
    default_traffic_pattern: str = "steady"
    random_seed: Optional[int] = None

    # Tick scheduling
    simulation_speed: float = 1.0
    failure_duration_seconds: float = 10.0

    # Retention
    metric_history_size: int = 30
    alert_history_size: int = 20

    # Graph defaults
    default_region: str = "us-east-1"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return json.loads(v)
        return v


settings = Settings()
