"""
Pulumi program entry point for the application infrastructure.

Instantiates all component resources in dependency order:
1. Configuration
2. ECR repository → GitHub Actions role
3. VPC → Security Groups
4. RDS
5. App Runner
6. WAF, CloudFront (environment toggles)
7. Monitoring, AWS Backup (production)
"""

import pulumi
import pulumi_aws as aws

from IAC.configs.environment import get_config
from IAC.utils.ecr import derive_placeholder_seed_config
from IAC.utils.exceptions import ConfigurationError
from IAC.utils.naming import ResourceNamer

# Networking
from IAC.components.networking.vpc import VpcComponent
from IAC.components.networking.security_groups import SecurityGroupsComponent

# Storage
from IAC.components.storage.rds_postgres import RdsPostgresComponent
from IAC.components.storage.ecr_repository import EcrRepositoryComponent
from IAC.components.storage.backup import BackupComponent

# Compute
from IAC.components.compute.app_runner import AppRunnerComponent

# Edge
from IAC.components.edge.waf import WafComponent
from IAC.components.edge.cloudfront import CloudFrontComponent

# Security
from IAC.components.security.github_actions_role import GitHubActionsRoleComponent

# Monitoring
from IAC.components.monitoring.monitoring import MonitoringComponent


def _availability_zones(count: int) -> list[str]:
    """First `count` available AZs in the provider's region."""
    names = aws.get_availability_zones(state="available").names
    if len(names) < count:
        raise ConfigurationError(
            "Region has fewer available AZs than requested",
            {"requested": count, "available": len(names)},
        )
    return names[:count]


def main() -> None:
    """Deploy the application infrastructure for the current stack."""
    # Load configuration
    config = get_config()
    namer = ResourceNamer(project=config.app_name, environment=config.environment)
    base_name = namer.name("")

    pulumi_config = pulumi.Config()
    db_password = pulumi_config.require_secret("dbPassword")

    # Get AWS account and region from provider
    account_id = aws.get_caller_identity().account_id
    aws_region = aws.get_region().name

    pulumi.log.info(f"Deploying {base_name} to {aws_region}")

    # --- Layer 1: Image registry and CI/CD access ---
    ecr_repository = EcrRepositoryComponent(
        name=base_name,
        config=config,
        namer=namer,
        account_id=account_id,
    )
    ecr_outputs = ecr_repository.get_outputs()

    github_role = GitHubActionsRoleComponent(
        name=base_name,
        app_name=config.app_name,
        environment=config.environment,
        github_org=config.github_org,
        github_repo=config.github_repo,
        github_branches=config.github_branches,
        github_environments=(config.environment,),
        ecr_repository_arns=[ecr_outputs.repository_arn],
        account_id=account_id,
        region=aws_region,
        additional_policy_arns=(
            ["arn:aws:iam::aws:policy/CloudWatchReadOnlyAccess"] if config.is_production else None
        ),
    )
    github_outputs = github_role.get_outputs()

    # --- Layer 2: Networking Foundation ---
    vpc = VpcComponent(
        name=base_name,
        environment=config.environment,
        cidr_block=config.vpc_cidr,
        availability_zones=_availability_zones(config.availability_zone_count),
    )
    vpc_outputs = vpc.get_outputs()

    security_groups = SecurityGroupsComponent(
        name=base_name,
        environment=config.environment,
        vpc_id=vpc_outputs.vpc_id,
    )
    sg_outputs = security_groups.get_outputs()

    # --- Layer 3: Database ---
    rds = RdsPostgresComponent(
        name=base_name,
        config=config,
        namer=namer,
        vpc_id=vpc_outputs.vpc_id,
        subnet_ids=vpc_outputs.private_subnet_ids,
        allowed_security_group_ids=[sg_outputs.app_runner_sg_id],
        password=db_password,
    )
    rds_outputs = rds.get_outputs()

    # --- Layer 4: Compute ---
    seed = derive_placeholder_seed_config(config.ecr_image_uri)
    if seed.warning:
        pulumi.log.warn(seed.warning)
    image_uri = config.ecr_image_uri or ecr_repository.image_uri(seed.tag)

    app_runner = AppRunnerComponent(
        name=base_name,
        config=config,
        namer=namer,
        image_uri=image_uri,
        database_url=rds_outputs.connection_string,
        vpc_subnet_ids=vpc_outputs.private_subnet_ids,
        vpc_security_group_ids=[sg_outputs.app_runner_sg_id],
        ssm_parameter_paths=[namer.secret_path("")],
        account_id=account_id,
        region=aws_region,
    )
    app_outputs = app_runner.get_outputs()

    # --- Layer 5: Edge Services ---
    waf_arn = None
    if config.enable_waf:
        waf = WafComponent(
            name=base_name,
            environment=config.environment,
            namer=namer,
            resource_arn=app_outputs.service_arn,
            rate_limit=config.waf_rate_limit,
        )
        waf_arn = waf.get_outputs().web_acl_arn
    else:
        pulumi.log.info(f"WAF disabled for {config.environment}")

    cloudfront_domain = None
    if config.enable_cloudfront:
        cloudfront = CloudFrontComponent(
            name=base_name,
            environment=config.environment,
            service_url=app_outputs.service_url,
        )
        cloudfront_domain = cloudfront.get_outputs().domain_name

    # --- Layer 6: Monitoring and Backup ---
    monitoring = MonitoringComponent(
        name=base_name,
        config=config,
        namer=namer,
        account_id=account_id,
        region=aws_region,
        service_name=app_outputs.service_name,
        db_instance_identifier=rds_outputs.instance_identifier,
    )
    monitoring_outputs = monitoring.get_outputs()

    backup_vault_name = None
    if config.is_production:
        backup = BackupComponent(
            name=base_name,
            config=config,
            namer=namer,
            resource_arns=[rds_outputs.instance_arn],
        )
        backup_vault_name = backup.get_outputs().vault_name

    # --- Exports ---
    # Database connection string is omitted to keep the password out of stack outputs
    outputs = {
        "vpc_id": vpc_outputs.vpc_id,
        "public_subnet_ids": vpc_outputs.public_subnet_ids,
        "private_subnet_ids": vpc_outputs.private_subnet_ids,
        "public_subnet_cidrs": list(vpc.public_cidrs),
        "private_subnet_cidrs": list(vpc.private_cidrs),
        "database_endpoint": rds_outputs.endpoint,
        "db_security_group_id": rds_outputs.security_group_id,
        "app_service_url": app_outputs.service_url,
        "app_service_arn": app_outputs.service_arn,
        "ecr_repository_url": ecr_outputs.repository_url,
        "ecr_repository_arn": ecr_outputs.repository_arn,
        "github_actions_role_arn": github_outputs.role_arn,
        "waf_arn": waf_arn,
        "cloudfront_domain_name": cloudfront_domain,
        "alarm_topic_arn": monitoring_outputs.alarm_topic_arn,
        "dashboard_url": monitoring_outputs.dashboard_url,
        "budget_name": monitoring_outputs.budget_name,
        "backup_vault_name": backup_vault_name,
        "environment": config.environment,
        "region": aws_region,
        "account_id": account_id,
        "tags": config.get_tags(),
    }

    # Export to Pulumi stack
    for key, value in outputs.items():
        pulumi.export(key, value)


# Execute
main()
