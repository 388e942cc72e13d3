from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    """
    Keep a `src/` layout while allowing `pytest` to run without requiring an editable install.
    """

    project_root = Path(__file__).resolve().parents[1]
    src_path = project_root / "src"
    sys.path.insert(0, str(src_path))


@pytest.fixture()
def make_config(tmp_path):
    from trainbuilder.config.models import (
        AppConfig,
        AppSettings,
        EconomySettings,
        LoggingSettings,
        StorageSettings,
    )

    def _make(*, starting_budget: int = 1_000_000_000, dev_mode: bool = False) -> AppConfig:
        return AppConfig(
            app=AppSettings(name="Test", dev_mode=dev_mode),
            storage=StorageSettings(networks_dir=tmp_path / "networks"),
            economy=EconomySettings(starting_budget=starting_budget),
            logging=LoggingSettings(level="WARNING", format="%(message)s"),
        )

    return _make


@pytest.fixture()
def config(make_config):
    return make_config()


@pytest.fixture()
def client(config):
    from fastapi.testclient import TestClient

    from trainbuilder.api.app import create_app

    return TestClient(create_app(config))
