"""
Infrastructure constants.

Contains per-environment CIDR blocks, sizing tables, AWS name limits and
default tags.
"""

from typing import Final

ENVIRONMENTS: Final[tuple[str, ...]] = ("dev", "staging", "prod")

DEFAULT_APP_NAME: Final[str] = "my-app"
DEFAULT_DB_USERNAME: Final[str] = "postgres"
DEFAULT_GITHUB_ORG: Final[str] = "your-github-org"
DEFAULT_GITHUB_REPO: Final[str] = "your-repo-name"

# VPC Configuration (/24 = 256 addresses per environment)
VPC_CIDRS: Final[dict[str, str]] = {
    "dev": "10.0.0.0/24",
    "staging": "10.1.0.0/24",
    "prod": "10.2.0.0/24",
}

AVAILABILITY_ZONE_COUNTS: Final[dict[str, int]] = {
    "dev": 2,
    "staging": 2,
    "prod": 2,
}

# App Runner sizing by environment
APP_RUNNER_SCALING: Final[dict[str, dict[str, int]]] = {
    "dev": {"max_concurrency": 10, "max_size": 2, "min_size": 1},
    "staging": {"max_concurrency": 10, "max_size": 2, "min_size": 0},
    "prod": {"max_concurrency": 25, "max_size": 5, "min_size": 1},
}

APP_RUNNER_INSTANCE: Final[dict[str, dict[str, str]]] = {
    "dev": {"cpu": "0.25 vCPU", "memory": "0.5 GB"},
    "staging": {"cpu": "0.25 vCPU", "memory": "0.5 GB"},
    "prod": {"cpu": "0.5 vCPU", "memory": "1 GB"},
}

# RDS Instance classes by environment
RDS_INSTANCE_CLASSES: Final[dict[str, str]] = {
    "dev": "db.t3.micro",
    "staging": "db.t3.micro",
    "prod": "db.t4g.small",
}

RDS_STORAGE_GB: Final[dict[str, dict[str, int]]] = {
    "dev": {"allocated": 20, "max_allocated": 20},
    "staging": {"allocated": 20, "max_allocated": 50},
    "prod": {"allocated": 50, "max_allocated": 1000},
}

# ECR retention: untagged images by age, tagged images by count
ECR_RETENTION: Final[dict[str, dict[str, int]]] = {
    "dev": {"untagged_days": 7, "tagged_count": 5},
    "staging": {"untagged_days": 14, "tagged_count": 10},
    "prod": {"untagged_days": 30, "tagged_count": 20},
}

ECR_IMAGE_MUTABILITY: Final[dict[str, str]] = {
    "dev": "MUTABLE",
    "staging": "MUTABLE",
    "prod": "IMMUTABLE",
}

# WAF rate limits (requests per 5 minutes per IP)
WAF_RATE_LIMITS: Final[dict[str, int]] = {
    "dev": 1000,
    "staging": 2000,
    "prod": 2000,
}

WAF_ENABLED: Final[dict[str, bool]] = {
    "dev": False,
    "staging": True,
    "prod": True,
}

# Branch that deploys each environment
GITHUB_BRANCHES: Final[dict[str, str]] = {
    "dev": "develop",
    "staging": "staging",
    "prod": "main",
}

# Maximum physical name lengths imposed by AWS
NAME_LIMITS: Final[dict[str, int]] = {
    "apprunner_autoscaling": 32,
    "apprunner_service": 40,
    "apprunner_vpc_connector": 40,
    "apprunner_observability": 32,
    "rds_identifier": 63,
    "rds_parameter_group": 255,
    "iam_role": 64,
    "waf_web_acl": 128,
    "ecr_repository": 256,
    "rds_db_name": 63,
    "sns_topic": 256,
    "cloudwatch_alarm": 255,
    "cloudwatch_dashboard": 255,
    "budget": 100,
    "cost_anomaly": 1024,
    "backup_vault": 50,
    "backup_plan": 50,
    "backup_selection": 50,
}

COST_CENTERS: Final[dict[str, str]] = {
    "dev": "development",
    "staging": "staging",
    "prod": "production",
}

BACKUP_POLICIES: Final[dict[str, str]] = {
    "staging": "optional",
    "prod": "required",
}

# Default tags applied to all resources
DEFAULT_TAGS: Final[dict[str, str]] = {
    "Project": "pulumi-aws-infrastructure",
    "ManagedBy": "pulumi",
}

# Port configurations
PORTS: Final[dict[str, int]] = {
    "http": 80,
    "https": 443,
    "app": 8080,
    "postgres": 5432,
}

# Monthly cost budget per environment (USD)
MONTHLY_BUDGETS_USD: Final[dict[str, int]] = {
    "dev": 50,
    "staging": 50,
    "prod": 200,
}

# Budget notifications: (threshold %, ACTUAL or FORECASTED)
BUDGET_NOTIFICATIONS: Final[tuple[tuple[int, str], ...]] = (
    (80, "ACTUAL"),
    (100, "FORECASTED"),
)

# CloudWatch alarm thresholds; production alerts earlier
ALARM_THRESHOLDS: Final[dict[str, dict[str, float]]] = {
    "dev": {
        "response_time_ms": 2000,
        "error_count": 10,
        "error_rate_pct": 5,
        "db_cpu_pct": 90,
        "db_connections": 40,
        "db_free_storage_bytes": 2 * 1024 ** 3,
    },
    "staging": {
        "response_time_ms": 2000,
        "error_count": 10,
        "error_rate_pct": 5,
        "db_cpu_pct": 90,
        "db_connections": 40,
        "db_free_storage_bytes": 2 * 1024 ** 3,
    },
    "prod": {
        "response_time_ms": 1000,
        "error_count": 10,
        "error_rate_pct": 1,
        "db_cpu_pct": 80,
        "db_connections": 80,
        "db_free_storage_bytes": 2 * 1024 ** 3,
    },
}

# AWS Backup plan for production data
BACKUP_SCHEDULE: Final[str] = "cron(0 3 ? * * *)"  # 3 AM UTC daily
BACKUP_WINDOWS_MINUTES: Final[dict[str, int]] = {
    "start": 60,
    "completion": 300,
}
BACKUP_LIFECYCLE_DAYS: Final[dict[str, int]] = {
    "cold_storage_after": 30,
    "delete_after": 365,
}
