from .loader import ConfigError, ProviderConfig, load_config

__all__ = ["ConfigError", "ProviderConfig", "load_config"]
