"""Configuration module."""

from mcp_optimizer.config.settings import Config, get_config, load_config, reset_config

__all__ = ["Config", "get_config", "load_config", "reset_config"]
