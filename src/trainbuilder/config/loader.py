from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from trainbuilder.config.models import (
    AppConfig,
    AppSettings,
    EconomySettings,
    LoggingSettings,
    StorageSettings,
)
from trainbuilder.utils.logging import resolve_level


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _as_path(value: str, *, base_dir: Path) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base_dir / candidate)


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return None


def load_config(path: Optional[str | Path] = None, *, base_dir: Optional[Path] = None) -> AppConfig:
    """
    Load typed application config from JSON.

    - Path resolution is relative to `base_dir` (defaults to current working directory).
    - `.env` is loaded first so `TRAINBUILDER_*` variables can override file values.
    """

    load_dotenv()

    config_path = Path(
        path
        or os.getenv("TRAINBUILDER_CONFIG_PATH", "config/default.json")
    ).resolve()
    base_dir = (base_dir or Path.cwd()).resolve()

    raw = json.loads(config_path.read_text(encoding="utf-8"))

    app_raw: Mapping[str, Any] = raw.get("app", {})
    dev_mode = bool(app_raw.get("dev_mode", False))
    env_dev_mode = _env_bool("TRAINBUILDER_DEV_MODE")
    if env_dev_mode is not None:
        dev_mode = env_dev_mode
    api_prefix = str(app_raw.get("api_prefix", "/api")).rstrip("/")
    if api_prefix and not api_prefix.startswith("/"):
        raise ValueError(f"app.api_prefix must start with '/': {api_prefix}")
    app = AppSettings(
        name=str(app_raw.get("name", "Train Builder")),
        dev_mode=dev_mode,
        api_prefix=api_prefix,
    )

    storage_raw: Mapping[str, Any] = raw.get("storage", {})
    networks_dir = os.getenv("TRAINBUILDER_NETWORKS_DIR") or str(
        storage_raw.get("networks_dir", "data/networks")
    )
    storage = StorageSettings(networks_dir=_as_path(networks_dir, base_dir=base_dir))

    economy_raw: Mapping[str, Any] = raw.get("economy", {})
    economy = EconomySettings(
        starting_budget=int(economy_raw.get("starting_budget", 1_000_000_000)),
        start_year=int(economy_raw.get("start_year", 2024)),
        start_month=int(economy_raw.get("start_month", 1)),
    )
    if economy.starting_budget <= 0:
        raise ValueError(f"economy.starting_budget must be positive: {economy.starting_budget}")
    if not 1 <= economy.start_month <= 12:
        raise ValueError(f"Unsupported economy.start_month: {economy.start_month}")

    logging_raw: Mapping[str, Any] = raw.get("logging", {})
    file_value = logging_raw.get("file")
    log_file = None if not file_value else _as_path(str(file_value), base_dir=base_dir)
    logging_settings = LoggingSettings(
        level=str(logging_raw.get("level", "INFO")),
        format=str(logging_raw.get("format", "%(asctime)s %(levelname)s %(name)s - %(message)s")),
        file=log_file,
    )
    resolve_level(logging_settings.level)

    return AppConfig(
        app=app,
        storage=storage,
        economy=economy,
        logging=logging_settings,
    )
