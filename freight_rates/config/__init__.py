from .loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "ConfigError",
    "load_config",
]
