"""
AWS Backup Component for Production Data.

Steps:
1. Service role (backup.amazonaws.com) with the AWS-managed backup and
   restore policies.
2. Backup vault.
3. Backup plan: one daily rule at 03:00 UTC, moved to cold storage after
   30 days and deleted after a year.
4. Selection assigning the protected resources (the RDS instance) to the
   plan.

Wired for production only; dev and staging rely on RDS automated backups.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.base import EnvironmentConfig
from IAC.configs.constants import (
    BACKUP_LIFECYCLE_DAYS,
    BACKUP_SCHEDULE,
    BACKUP_WINDOWS_MINUTES,
    NAME_LIMITS,
)
from IAC.utils.exceptions import ConfigurationError
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags

BACKUP_POLICY_ARNS = (
    "arn:aws:iam::aws:policy/service-role/AWSBackupServiceRolePolicyForBackup",
    "arn:aws:iam::aws:policy/service-role/AWSBackupServiceRolePolicyForRestores",
)


@dataclass
class BackupOutputs:
    """Output values from Backup component."""
    vault_name: pulumi.Output[str]
    vault_arn: pulumi.Output[str]
    plan_id: pulumi.Output[str]
    role_arn: pulumi.Output[str]


class BackupComponent(pulumi.ComponentResource):
    """
    Daily AWS Backup plan for the given resources.
    """

    def __init__(
        self,
        name: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        resource_arns: list[pulumi.Input[str]],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        if not resource_arns:
            raise ConfigurationError(
                "BackupComponent requires at least one resource to protect",
                {"component": name},
            )

        super().__init__("custom:storage:Backup", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        environment = config.environment
        tags = create_tags(environment, f"{name}-backup")

        # Service role
        self.role = aws.iam.Role(
            f"{name}-backup-role",
            assume_role_policy=json.dumps({
                "Version": "2012-10-17",
                "Statement": [{
                    "Effect": "Allow",
                    "Principal": {"Service": "backup.amazonaws.com"},
                    "Action": "sts:AssumeRole",
                }],
            }),
            tags=create_tags(environment, f"{name}-backup-role"),
            opts=child_opts,
        )

        for i, policy_arn in enumerate(BACKUP_POLICY_ARNS):
            aws.iam.RolePolicyAttachment(
                f"{name}-backup-policy-{i}",
                role=self.role.name,
                policy_arn=policy_arn,
                opts=child_opts,
            )

        # Vault
        self.vault = aws.backup.Vault(
            f"{name}-backup-vault",
            name=namer.aws_name("backup-vault", NAME_LIMITS["backup_vault"]),
            tags=create_tags(environment, f"{name}-backup-vault"),
            opts=child_opts,
        )

        # Plan
        self.plan = aws.backup.Plan(
            f"{name}-backup-plan",
            name=namer.aws_name("backup-plan", NAME_LIMITS["backup_plan"]),
            rules=[
                aws.backup.PlanRuleArgs(
                    rule_name="daily-backup",
                    target_vault_name=self.vault.name,
                    schedule=BACKUP_SCHEDULE,
                    start_window=BACKUP_WINDOWS_MINUTES["start"],
                    completion_window=BACKUP_WINDOWS_MINUTES["completion"],
                    lifecycle=aws.backup.PlanRuleLifecycleArgs(
                        cold_storage_after=BACKUP_LIFECYCLE_DAYS["cold_storage_after"],
                        delete_after=BACKUP_LIFECYCLE_DAYS["delete_after"],
                    ),
                    recovery_point_tags=tags,
                ),
            ],
            tags=create_tags(environment, f"{name}-backup-plan"),
            opts=child_opts,
        )

        # Selection
        self.selection = aws.backup.Selection(
            f"{name}-backup-selection",
            name=namer.aws_name("backup-selection", NAME_LIMITS["backup_selection"]),
            iam_role_arn=self.role.arn,
            plan_id=self.plan.id,
            resources=resource_arns,
            opts=child_opts,
        )

        self.register_outputs({
            "vault_name": self.vault.name,
            "plan_id": self.plan.id,
        })

    def get_outputs(self) -> BackupOutputs:
        """Get Backup output values."""
        return BackupOutputs(
            vault_name=self.vault.name,
            vault_arn=self.vault.arn,
            plan_id=self.plan.id,
            role_arn=self.role.arn,
        )
