"""
Base configuration dataclass for environment settings.

Provides type-safe configuration structure loaded from Pulumi stack configs.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any

from IAC.configs import constants
from IAC.utils.exceptions import ConfigurationError

_DB_NAME_INVALID_RUNS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Environment-specific configuration for infrastructure deployment.

    Attributes:
        environment: Deployment environment (dev, staging, prod)
        app_name: Application name used as the resource name prefix
        vpc_cidr: Base CIDR block for the VPC
        availability_zone_count: Number of AZs to spread subnets across
        app_runner_cpu: App Runner instance CPU (e.g., '0.25 vCPU')
        app_runner_memory: App Runner instance memory (e.g., '0.5 GB')
        app_runner_max_concurrency: Requests per instance before scaling out
        app_runner_max_size: Maximum App Runner instances
        app_runner_min_size: Minimum App Runner instances
        rds_instance_class: RDS instance class for PostgreSQL
        rds_allocated_storage: RDS storage in GB
        rds_max_allocated_storage: RDS storage autoscaling limit in GB
        db_username: Master username for PostgreSQL
        enable_waf: Attach a WAF web ACL to the App Runner service
        waf_rate_limit: Requests per 5 minutes per IP before blocking
        enable_cloudfront: Put a CloudFront distribution in front of App Runner
        ecr_image_mutability: ECR tag mutability (MUTABLE or IMMUTABLE)
        ecr_retention_days: Days to keep untagged images
        ecr_tagged_image_count: Number of tagged images to keep
        ecr_image_uri: Optional explicit image URI for App Runner
        github_org: GitHub organisation allowed to assume the deploy role
        github_repo: GitHub repository allowed to assume the deploy role
        github_branches: Branches allowed to assume the deploy role
        monthly_budget_usd: Monthly cost budget for the environment in USD
        alert_email: Optional address subscribed to alarms and budget alerts
        enable_cost_budget: Create the monthly cost budget
        enable_cost_anomaly: Create a Cost Explorer anomaly monitor
    """
    environment: str
    app_name: str
    vpc_cidr: str
    availability_zone_count: int
    app_runner_cpu: str
    app_runner_memory: str
    app_runner_max_concurrency: int
    app_runner_max_size: int
    app_runner_min_size: int
    rds_instance_class: str
    rds_allocated_storage: int
    rds_max_allocated_storage: int
    db_username: str
    enable_waf: bool
    waf_rate_limit: int
    enable_cloudfront: bool
    ecr_image_mutability: str
    ecr_retention_days: int
    ecr_tagged_image_count: int
    monthly_budget_usd: int
    ecr_image_uri: str | None = None
    alert_email: str | None = None
    enable_cost_budget: bool = True
    enable_cost_anomaly: bool = False
    github_org: str = constants.DEFAULT_GITHUB_ORG
    github_repo: str = constants.DEFAULT_GITHUB_REPO
    github_branches: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def for_environment(cls, environment: str, **overrides: Any) -> "EnvironmentConfig":
        """
        Build the documented defaults for an environment.

        Args:
            environment: One of dev, staging, prod
            **overrides: Field values that replace the defaults

        Returns:
            EnvironmentConfig with defaults and overrides applied

        Raises:
            ConfigurationError: If the environment or an override name is unknown
        """
        if environment not in constants.ENVIRONMENTS:
            raise ConfigurationError(
                f"Unknown environment: {environment}",
                {"environment": environment, "allowed": list(constants.ENVIRONMENTS)},
            )

        scaling = constants.APP_RUNNER_SCALING[environment]
        instance = constants.APP_RUNNER_INSTANCE[environment]
        storage = constants.RDS_STORAGE_GB[environment]
        retention = constants.ECR_RETENTION[environment]

        config = cls(
            environment=environment,
            app_name=constants.DEFAULT_APP_NAME,
            vpc_cidr=constants.VPC_CIDRS[environment],
            availability_zone_count=constants.AVAILABILITY_ZONE_COUNTS[environment],
            app_runner_cpu=instance["cpu"],
            app_runner_memory=instance["memory"],
            app_runner_max_concurrency=scaling["max_concurrency"],
            app_runner_max_size=scaling["max_size"],
            app_runner_min_size=scaling["min_size"],
            rds_instance_class=constants.RDS_INSTANCE_CLASSES[environment],
            rds_allocated_storage=storage["allocated"],
            rds_max_allocated_storage=storage["max_allocated"],
            db_username=constants.DEFAULT_DB_USERNAME,
            enable_waf=constants.WAF_ENABLED[environment],
            waf_rate_limit=constants.WAF_RATE_LIMITS[environment],
            enable_cloudfront=False,
            ecr_image_mutability=constants.ECR_IMAGE_MUTABILITY[environment],
            ecr_retention_days=retention["untagged_days"],
            ecr_tagged_image_count=retention["tagged_count"],
            monthly_budget_usd=constants.MONTHLY_BUDGETS_USD[environment],
            github_branches=(constants.GITHUB_BRANCHES[environment],),
        )

        unknown = set(overrides) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                "Unknown configuration fields",
                {"fields": sorted(unknown)},
            )
        return replace(config, **overrides)

    @property
    def is_production(self) -> bool:
        """Check if this is a production environment."""
        return self.environment == "prod"

    @property
    def multi_az(self) -> bool:
        """Multi-AZ RDS only for production."""
        return self.is_production

    @property
    def db_name(self) -> str:
        """
        PostgreSQL database name.

        Lowercase letters, digits and underscores, starting with a letter:
        'my-app' in dev gives 'my_app_dev', '1app' gives 'db_1app_dev'.
        """
        name = _DB_NAME_INVALID_RUNS.sub("_", f"{self.app_name}_{self.environment}".lower())
        name = name.strip("_")
        if not name[:1].isalpha():
            name = f"db_{name}"
        return name[:constants.NAME_LIMITS["rds_db_name"]].rstrip("_")

    def get_tags(self) -> dict[str, str]:
        """Get environment-specific tags."""
        # Imported here: IAC.utils.tags imports IAC.configs.constants
        from IAC.utils.tags import environment_tags

        return environment_tags(self.environment)
