"""
Utility functions for Pulumi infrastructure.

Provides naming conventions, subnet planning, tag factories and
connection string helpers.
"""

from IAC.utils.naming import ResourceNamer, build_name
from IAC.utils.cidr import (
    CidrBlock,
    SubnetPlan,
    parse_cidr,
    determine_subnet_prefix,
    derive_subnet_cidr,
    plan_subnets,
)
from IAC.utils.tags import create_tags, merge_tags
from IAC.utils.database import build_database_connection_string
from IAC.utils.ecr import derive_placeholder_seed_config

__all__ = [
    "ResourceNamer",
    "build_name",
    "CidrBlock",
    "SubnetPlan",
    "parse_cidr",
    "determine_subnet_prefix",
    "derive_subnet_cidr",
    "plan_subnets",
    "create_tags",
    "merge_tags",
    "build_database_connection_string",
    "derive_placeholder_seed_config",
]
