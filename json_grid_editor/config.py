"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .log import get_logger
from .validation import is_valid_document_id

logger = get_logger('config')

MAX_NESTING_LEVEL = 1
DEFAULT_MAX_COLUMNS = 20


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path('data')
    log_dir: Path = Path('logs')
    max_columns: int = DEFAULT_MAX_COLUMNS
    max_upload_size_mb: int = 1
    file_ttl_hours: int = 24
    server_port: int = 8080
    default_document_id: str = 'demo'
    max_nesting_level: int = MAX_NESTING_LEVEL

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %d", name, raw, default)
        return default
    return value


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """Build Settings from `env` (defaults to os.environ after loading .env)."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    defaults = Settings()
    settings = Settings(
        data_dir=Path(env.get('JSON_GRID_DATA_DIR') or defaults.data_dir),
        log_dir=Path(env.get('JSON_GRID_LOG_DIR') or defaults.log_dir),
        max_columns=_int_setting(env, 'MAX_KEYS', defaults.max_columns),
        max_upload_size_mb=_int_setting(env, 'MAX_UPLOAD_SIZE_MB', defaults.max_upload_size_mb),
        file_ttl_hours=_int_setting(env, 'FILE_TTL_HOURS', defaults.file_ttl_hours),
        server_port=_int_setting(env, 'PORT', defaults.server_port),
        default_document_id=(env.get('JSON_GRID_DEFAULT_ID') or defaults.default_document_id).strip(),
    )
    if not is_valid_document_id(settings.default_document_id):
        raise ConfigError(f"JSON_GRID_DEFAULT_ID must match [A-Za-z0-9_-]+, got {settings.default_document_id!r}")
    return settings
