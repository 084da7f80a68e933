from .config import StorageSettings, load_settings

__all__ = ["StorageSettings", "load_settings"]
