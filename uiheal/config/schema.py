from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class EnvironmentConfig(BaseModel):
    base_url: str = "about:blank"
    browser_matrix: list[str] = Field(default_factory=lambda: ["chrome"])
    default_timeout_seconds: int = 10
    headless: bool = True

    @field_validator("browser_matrix")
    @classmethod
    def validate_browsers(cls, value: list[str]) -> list[str]:
        allowed = {"chrome", "firefox"}
        normalized = [item.lower() for item in value]
        invalid = [item for item in normalized if item not in allowed]
        if invalid:
            raise ValueError(f"Unsupported browsers: {', '.join(invalid)}")
        return normalized


class DetectionConfig(BaseModel):
    text_limit: int = Field(default=100, gt=0)
    snapshot_node_limit: int = Field(default=2000, gt=0)


class HealingConfig(BaseModel):
    max_candidates_per_strategy: int = Field(default=20, gt=0)
    semantic_threshold: int = 40
    default_timeout_ms: int = Field(default=5000, gt=0)
    retry_window_seconds: float = Field(default=2.0, ge=0)
    max_history: int = Field(default=500, gt=0)


class ArtifactConfig(BaseModel):
    root: str = "artifacts"
    capture_dom_on_failure: bool = False


class EngineConfig(BaseModel):
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    healing: HealingConfig = Field(default_factory=HealingConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)

    @classmethod
    def load(cls, path: str | Path) -> EngineConfig:
        """Reads a JSON config file; omitted sections keep their defaults.

        A relative artifact root is resolved against the file's directory.
        """

        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            config = cls.model_validate(json.load(handle))
        root = Path(config.artifacts.root)
        if not root.is_absolute():
            config.artifacts.root = str((config_path.parent / root).resolve())
        return config
