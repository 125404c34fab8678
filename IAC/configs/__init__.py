"""
Configuration module for Pulumi infrastructure.

Provides type-safe configuration loading from Pulumi stack config files.
"""

from IAC.configs.base import EnvironmentConfig
from IAC.configs.environment import get_config
from IAC.configs.constants import (
    VPC_CIDRS,
    NAME_LIMITS,
    DEFAULT_TAGS,
    PORTS,
)

__all__ = [
    "EnvironmentConfig",
    "get_config",
    "VPC_CIDRS",
    "NAME_LIMITS",
    "DEFAULT_TAGS",
    "PORTS",
]
