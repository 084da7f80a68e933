from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from haven_lib.config.config import StorageSettings, load_settings


def configure_logging(config_path: Optional[Path] = None,
                      settings: Optional[StorageSettings] = None) -> logging.Logger:
    """Configure root logging for the storage tooling.

    Starts with an early NOTSET basic config so reading the settings file
    can itself log, then reconfigures the root logger at the `log_level`
    from the YAML config, or from `settings` when the caller already
    loaded them. Returns a module logger for the caller.
    """
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')

    if settings is None:
        settings = load_settings(config_path)
    level = getattr(logging, settings.log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.log(100, f'[haven]: Log level set to: {logging.getLevelName(level)}')

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    return logging.getLogger(__name__)
