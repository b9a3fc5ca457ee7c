"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: EnvConfigProvider.get_x1_config()
Hidden: Config sources, environment parsing, defaults

Can be replaced with any provider implementing ConfigProvider.
"""

from .provider import ConfigProvider, EnvConfigProvider, RetryConfig, X1Config

__all__ = ["ConfigProvider", "EnvConfigProvider", "RetryConfig", "X1Config"]
