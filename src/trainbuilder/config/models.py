from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class AppSettings:
    name: str = "Train Builder"
    dev_mode: bool = False
    api_prefix: str = "/api"


@dataclass(frozen=True)
class StorageSettings:
    networks_dir: Path


@dataclass(frozen=True)
class EconomySettings:
    starting_budget: int = 1_000_000_000
    start_year: int = 2024
    start_month: int = 1


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str
    file: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    storage: StorageSettings
    economy: EconomySettings
    logging: LoggingSettings
