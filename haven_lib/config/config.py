import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('data/config/storage_config.yml')
# Browsers typically allow about 5 MiB per origin and store
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class StorageSettings(BaseModel):
    prefix: str = 'hwc_'
    data_dir: str = './data/storage'
    persistent_quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES
    session_quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES
    serializer: Literal['json', 'yaml'] = 'json'
    compact_large_strings: bool = True
    log_level: str = 'WARNING'


def load_settings(config_path: Optional[Path] = None) -> StorageSettings:
    """Read storage settings from YAML, falling back to defaults.

    A missing file is normal on first start. A file that cannot be parsed
    or validated is logged and ignored.
    """
    cfg_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        logger.debug('No storage config at %s; using defaults', cfg_path)
        return StorageSettings()
    try:
        with cfg_path.open('r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError('top level of the storage config must be a mapping')
        return StorageSettings(**raw)
    except (OSError, yaml.YAMLError, ValueError, ValidationError):
        logger.exception('Failed to load storage config from %s; using defaults', cfg_path)
        return StorageSettings()
