"""
RDS PostgreSQL Component for Relational Database.

Access Control - Who Can Connect:
1. App Runner (via VPC connector SG) → Port 5432 ✅
2. Any other SG passed in allowed_security_group_ids → Port 5432 ✅
3. Anyone else → DENIED ❌

Environment Toggles:
- Multi-AZ, deletion protection, final snapshot, Performance Insights and
  enhanced monitoring are production-only.
- Backups: 7 days in production, 1 day elsewhere.

The connection string output embeds the password and is always secret.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.base import EnvironmentConfig
from IAC.configs.constants import NAME_LIMITS, PORTS
from IAC.utils.database import build_database_connection_string
from IAC.utils.exceptions import ConfigurationError
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags


@dataclass
class RdsOutputs:
    """Output values from RDS component."""
    instance_identifier: pulumi.Output[str]
    instance_arn: pulumi.Output[str]
    endpoint: pulumi.Output[str]
    address: pulumi.Output[str]
    port: pulumi.Output[int]
    database_name: pulumi.Output[str]
    security_group_id: pulumi.Output[str]
    connection_string: pulumi.Output[str]


def build_ingress_rules(
    allowed_security_group_ids: list[pulumi.Input[str]],
) -> list[aws.ec2.SecurityGroupIngressArgs]:
    """One PostgreSQL ingress rule per allowed source security group."""
    return [
        aws.ec2.SecurityGroupIngressArgs(
            protocol="tcp",
            from_port=PORTS["postgres"],
            to_port=PORTS["postgres"],
            security_groups=[sg_id],
            description=f"Postgres ingress from SG ({i + 1})",
        )
        for i, sg_id in enumerate(allowed_security_group_ids)
    ]


class RdsPostgresComponent(pulumi.ComponentResource):
    """
    RDS PostgreSQL database for application persistence.
    """

    def __init__(
        self,
        name: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        allowed_security_group_ids: list[pulumi.Input[str]],
        password: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        if not allowed_security_group_ids:
            raise ConfigurationError(
                "RdsPostgresComponent requires at least one allowed security group",
                {"component": name},
            )

        super().__init__("custom:storage:RdsPostgres", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        environment = config.environment
        is_production = config.is_production

        # DB Subnet Group
        self.subnet_group = aws.rds.SubnetGroup(
            f"{name}-subnet-group",
            subnet_ids=subnet_ids,
            tags=create_tags(environment, f"{name}-subnet-group"),
            opts=child_opts,
        )

        # Database Security Group: ingress only from allowed SGs
        self.security_group = aws.ec2.SecurityGroup(
            f"{name}-db-sg",
            description=f"Security group for {config.app_name} RDS instance",
            vpc_id=vpc_id,
            ingress=build_ingress_rules(allowed_security_group_ids),
            egress=[
                aws.ec2.SecurityGroupEgressArgs(
                    protocol="-1",
                    from_port=0,
                    to_port=0,
                    cidr_blocks=["0.0.0.0/0"],
                ),
            ],
            tags=create_tags(environment, f"{name}-db-sg"),
            opts=child_opts,
        )

        # Parameter Group
        self.parameter_group = aws.rds.ParameterGroup(
            f"{name}-params",
            name=namer.rds_name("postgres-params", NAME_LIMITS["rds_parameter_group"]),
            family="postgres15",
            description=f"PostgreSQL 15 parameter group for {config.app_name}-{environment}",
            parameters=[
                aws.rds.ParameterGroupParameterArgs(
                    name="shared_preload_libraries",
                    value="pg_stat_statements",
                    apply_method="pending-reboot",
                ),
                aws.rds.ParameterGroupParameterArgs(
                    name="log_statement",
                    value="none" if is_production else "all",
                ),
                aws.rds.ParameterGroupParameterArgs(
                    name="log_min_duration_statement",
                    value="1000",  # Log queries > 1 second
                ),
                aws.rds.ParameterGroupParameterArgs(
                    name="max_connections",
                    value="200" if is_production else "100",
                    apply_method="pending-reboot",
                ),
            ],
            tags=create_tags(environment, f"{name}-params"),
            opts=child_opts,
        )

        monitoring_role_arn = None
        if is_production:
            monitoring_role_arn = self._create_monitoring_role(name, environment, child_opts).arn

        identifier = namer.rds_name("postgres", NAME_LIMITS["rds_identifier"])

        # RDS Instance
        self.instance = aws.rds.Instance(
            f"{name}-postgres",
            identifier=identifier,
            engine="postgres",
            engine_version="15.4",
            instance_class=config.rds_instance_class,
            allocated_storage=config.rds_allocated_storage,
            max_allocated_storage=config.rds_max_allocated_storage,
            storage_type="gp3",
            storage_encrypted=True,
            db_name=config.db_name,
            username=config.db_username,
            password=password,
            port=PORTS["postgres"],
            db_subnet_group_name=self.subnet_group.name,
            vpc_security_group_ids=[self.security_group.id],
            parameter_group_name=self.parameter_group.name,
            publicly_accessible=False,
            multi_az=config.multi_az,
            backup_retention_period=7 if is_production else 1,
            backup_window="03:00-04:00",
            maintenance_window="sun:04:00-sun:05:00",
            performance_insights_enabled=is_production,
            performance_insights_retention_period=7 if is_production else None,
            monitoring_interval=60 if is_production else 0,
            monitoring_role_arn=monitoring_role_arn,
            deletion_protection=is_production,
            skip_final_snapshot=not is_production,
            final_snapshot_identifier=f"{identifier}-final-snapshot" if is_production else None,
            tags=create_tags(
                environment,
                f"{name}-postgres",
                BackupRequired="true" if is_production else "false",
            ),
            opts=child_opts,
        )

        self.connection_string = build_database_connection_string(
            username=config.db_username,
            password=password,
            host=self.instance.address,
            port=self.instance.port,
            database=config.db_name,
        )

        self.register_outputs({
            "instance_identifier": self.instance.identifier,
            "endpoint": self.instance.endpoint,
            "database_name": config.db_name,
            "security_group_id": self.security_group.id,
            "connection_string": self.connection_string,
        })

    def _create_monitoring_role(
        self,
        name: str,
        environment: str,
        opts: pulumi.ResourceOptions,
    ) -> aws.iam.Role:
        """Create the enhanced monitoring role (production only)."""
        role = aws.iam.Role(
            f"{name}-monitoring-role",
            assume_role_policy=json.dumps({
                "Version": "2012-10-17",
                "Statement": [{
                    "Effect": "Allow",
                    "Principal": {"Service": "monitoring.rds.amazonaws.com"},
                    "Action": "sts:AssumeRole",
                }],
            }),
            tags=create_tags(environment, f"{name}-monitoring-role"),
            opts=opts,
        )

        aws.iam.RolePolicyAttachment(
            f"{name}-monitoring-policy",
            role=role.name,
            policy_arn="arn:aws:iam::aws:policy/service-role/AmazonRDSEnhancedMonitoringRole",
            opts=opts,
        )
        return role

    def get_outputs(self) -> RdsOutputs:
        """Get RDS output values."""
        return RdsOutputs(
            instance_identifier=self.instance.identifier,
            instance_arn=self.instance.arn,
            endpoint=self.instance.endpoint,
            address=self.instance.address,
            port=self.instance.port,
            database_name=self.instance.db_name,
            security_group_id=self.security_group.id,
            connection_string=self.connection_string,
        )
