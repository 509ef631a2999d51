# ==============================================
# Configuration
# ==============================================
#
# PURPOSE:
#   Typed settings for the record store backends and the query
#   engine, read once from the process environment and an optional
#   .env file at the project root.
#
# SECTIONS:
# ---------
# - MySQLConfig   ← MYSQL_HOST / MYSQL_PORT / MYSQL_USER / MYSQL_PASSWORD / MYSQL_DATABASE
# - MongoConfig   ← MONGO_HOST / MONGO_PORT / MONGO_USER / MONGO_PASSWORD / MONGO_DATABASE
#                   (empty MONGO_USER / MONGO_PASSWORD mean "no auth")
# - EngineConfig  ← STORE_BACKEND    memory | file | mongo | mysql   (default file)
#                   DATA_DIR         file store directory            (default data/)
#                   STATS_SAMPLE_SIZE readable records sampled by stats (default 100)
#                   MAX_DATASET_NAME_LENGTH                          (default 100)
#                   LOG_LEVEL                                        (default INFO)
# - AppConfig     → one of each section
#
# Each section has a from_env() classmethod; the dataclass defaults
# are the documented defaults, so a missing variable simply falls
# through to them.
#
# ACCESS:
# -------
#   from dataset_engine.config import get_config
#   config = get_config()           # cached after the first call
#   config.engine.store_backend
#
#   reset_config() drops the cache so tests can change the environment.
#
# ==============================================

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

STORE_BACKENDS = ("memory", "file", "mongo", "mysql")

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


def _env(name: str) -> Optional[str]:
    # Blank counts as unset
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value


def _collect(section, variables: Dict[str, str]) -> Dict[str, Any]:
    """Read the variables present in the environment, cast to the field types."""
    types = {f.name: f.type for f in fields(section)}
    values: Dict[str, Any] = {}
    for attribute, variable in variables.items():
        raw = _env(variable)
        if raw is None:
            continue
        values[attribute] = int(raw) if types[attribute] in (int, "int") else raw
    return values


@dataclass
class MySQLConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "dataset_db"

    @classmethod
    def from_env(cls) -> "MySQLConfig":
        return cls(**_collect(cls, {
            "host": "MYSQL_HOST",
            "port": "MYSQL_PORT",
            "user": "MYSQL_USER",
            "password": "MYSQL_PASSWORD",
            "database": "MYSQL_DATABASE",
        }))


@dataclass
class MongoConfig:
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "dataset_db"

    @classmethod
    def from_env(cls) -> "MongoConfig":
        return cls(**_collect(cls, {
            "host": "MONGO_HOST",
            "port": "MONGO_PORT",
            "user": "MONGO_USER",
            "password": "MONGO_PASSWORD",
            "database": "MONGO_DATABASE",
        }))


@dataclass
class EngineConfig:
    """Which record store to use, and the query engine's limits."""
    store_backend: str = "file"
    data_dir: str = "data/"
    sample_size: int = 100
    max_name_length: int = 100
    log_level: str = "INFO"

    def __post_init__(self):
        self.store_backend = self.store_backend.strip().lower()
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, "
                f"got '{self.store_backend}'"
            )
        if self.sample_size < 1:
            raise ValueError("STATS_SAMPLE_SIZE must be at least 1")
        if self.max_name_length < 1:
            raise ValueError("MAX_DATASET_NAME_LENGTH must be at least 1")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(**_collect(cls, {
            "store_backend": "STORE_BACKEND",
            "data_dir": "DATA_DIR",
            "sample_size": "STATS_SAMPLE_SIZE",
            "max_name_length": "MAX_DATASET_NAME_LENGTH",
            "log_level": "LOG_LEVEL",
        }))


@dataclass
class AppConfig:
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            mysql=MySQLConfig.from_env(),
            mongo=MongoConfig.from_env(),
            engine=EngineConfig.from_env(),
        )


_cached: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Return the application configuration, loading it on first use.

    Variables already set in the process environment win over the
    .env file.

    Returns:
        AppConfig: The cached configuration
    """
    global _cached
    if _cached is None:
        load_dotenv(dotenv_path=ENV_FILE)
        _cached = AppConfig.from_env()
    return _cached


def reset_config() -> None:
    global _cached
    _cached = None
