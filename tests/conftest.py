from __future__ import annotations

from pathlib import Path

import pytest

from uiheal.config.schema import EngineConfig
from uiheal.logging.artifacts import ArtifactManager


@pytest.fixture()
def engine_config():
    config_path = Path(__file__).resolve().parents[1] / "config" / "engine.json"
    return EngineConfig.load(config_path)


@pytest.fixture()
def artifact_manager(tmp_path):
    manager = ArtifactManager(tmp_path / "artifacts")
    manager.reset()
    return manager
