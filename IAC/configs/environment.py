"""
Environment configuration loader.

Loads and validates configuration from Pulumi stack config files.
"""

import pulumi

from IAC.configs.base import EnvironmentConfig
from IAC.utils.cidr import parse_cidr


def _collect_overrides(config: pulumi.Config) -> dict:
    """Read optional stack config keys into EnvironmentConfig field overrides."""
    string_keys = {
        "appName": "app_name",
        "vpcCidr": "vpc_cidr",
        "appRunnerCpu": "app_runner_cpu",
        "appRunnerMemory": "app_runner_memory",
        "rdsInstanceClass": "rds_instance_class",
        "dbUsername": "db_username",
        "ecrImageUri": "ecr_image_uri",
        "githubOrg": "github_org",
        "githubRepo": "github_repo",
        "alertEmail": "alert_email",
    }
    int_keys = {
        "azCount": "availability_zone_count",
        "appRunnerMaxConcurrency": "app_runner_max_concurrency",
        "appRunnerMaxSize": "app_runner_max_size",
        "appRunnerMinSize": "app_runner_min_size",
        "rdsAllocatedStorage": "rds_allocated_storage",
        "rdsMaxAllocatedStorage": "rds_max_allocated_storage",
        "wafRateLimit": "waf_rate_limit",
        "ecrRetentionDays": "ecr_retention_days",
        "monthlyBudget": "monthly_budget_usd",
    }
    bool_keys = {
        "enableWaf": "enable_waf",
        "enableCloudFront": "enable_cloudfront",
        "enableCostBudget": "enable_cost_budget",
        "enableCostAnomaly": "enable_cost_anomaly",
    }

    overrides: dict = {}
    for key, field_name in string_keys.items():
        value = config.get(key)
        if value:
            overrides[field_name] = value
    for key, field_name in int_keys.items():
        value = config.get_int(key)
        if value is not None:
            overrides[field_name] = value
    for key, field_name in bool_keys.items():
        value = config.get_bool(key)
        if value is not None:
            overrides[field_name] = value

    branches = config.get_object("githubBranches")
    if branches:
        overrides["github_branches"] = tuple(branches)
    return overrides


def get_config() -> EnvironmentConfig:
    """
    Load environment configuration from Pulumi stack config.

    The environment defaults to the stack name (dev, staging, prod).

    Returns:
        EnvironmentConfig: Validated configuration object

    Raises:
        ConfigurationError: If the environment is unknown
        InvalidCidrFormat: If vpcCidr is malformed
    """
    config = pulumi.Config()
    environment = config.get("environment") or pulumi.get_stack()

    env_config = EnvironmentConfig.for_environment(environment, **_collect_overrides(config))

    # Fail before any resource is declared
    parse_cidr(env_config.vpc_cidr)
    return env_config
