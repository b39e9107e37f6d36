"""Configuration module for boxcar."""

from boxcar.config.loader import load_config, get_config_path
from boxcar.config.schema import BoxcarConfig, ClientConfig, ServerConfig

__all__ = ["BoxcarConfig", "ClientConfig", "ServerConfig", "load_config", "get_config_path"]
