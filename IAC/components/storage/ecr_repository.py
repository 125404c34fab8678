"""
ECR Repository Component for App Runner Container Images.

Integration Flow:
  1. CI (GitHub Actions, via the OIDC deploy role) builds the image.
  2. CI pushes to <ECR_URL>:<tag>.
  3. App Runner pulls <ECR_URL>:<tag> using its ECR access role.

Key Features:
- scan_on_push=True: Every image is scanned for CVEs on upload.
- Lifecycle Policy (per environment):
    dev     keep 5 tagged, expire untagged after 7 days
    staging keep 10 tagged, expire untagged after 14 days
    prod    keep 20 tagged, expire untagged after 30 days
- Encryption: Images encrypted at rest (AES256).
- Tag mutability: MUTABLE outside production, IMMUTABLE in production.
- Repository Policy (production only): same-account pull and App Runner
  build service pull.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.base import EnvironmentConfig
from IAC.configs.constants import NAME_LIMITS
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags

TAG_PREFIXES = ["v", "latest", "main", "develop", "staging", "prod"]

PULL_ACTIONS = [
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
    "ecr:BatchCheckLayerAvailability",
]


@dataclass
class EcrRepositoryOutputs:
    """Output values from ECR repository component."""
    repository_url: pulumi.Output[str]
    repository_arn: pulumi.Output[str]
    repository_name: pulumi.Output[str]


def build_lifecycle_policy(untagged_retention_days: int, tagged_retention_count: int) -> dict:
    """Lifecycle rules: cap tagged images by count, expire untagged images by age."""
    return {
        "rules": [
            {
                "rulePriority": 1,
                "description": "Keep last N tagged images",
                "selection": {
                    "tagStatus": "tagged",
                    "tagPrefixList": TAG_PREFIXES,
                    "countType": "imageCountMoreThan",
                    "countNumber": tagged_retention_count,
                },
                "action": {"type": "expire"},
            },
            {
                "rulePriority": 2,
                "description": "Delete untagged images older than N days",
                "selection": {
                    "tagStatus": "untagged",
                    "countType": "sinceImagePushed",
                    "countUnit": "days",
                    "countNumber": untagged_retention_days,
                },
                "action": {"type": "expire"},
            },
        ],
    }


def build_repository_policy(account_id: str) -> dict:
    """Pull access for the owning account and the App Runner build service."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "AllowAccountPull",
                "Effect": "Allow",
                "Principal": {"AWS": [f"arn:aws:iam::{account_id}:root"]},
                "Action": PULL_ACTIONS,
            },
            {
                "Sid": "AllowAppRunnerServiceRole",
                "Effect": "Allow",
                "Principal": {"Service": "build.apprunner.amazonaws.com"},
                "Action": PULL_ACTIONS,
            },
        ],
    }


class EcrRepositoryComponent(pulumi.ComponentResource):
    """
    ECR repository for the application container image.
    """

    def __init__(
        self,
        name: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        account_id: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:EcrRepository", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        environment = config.environment

        # ECR repository names must be lowercase
        repository_name = namer.aws_name("", NAME_LIMITS["ecr_repository"]).lower()

        self.repository = aws.ecr.Repository(
            f"{name}-ecr",
            name=repository_name,
            image_scanning_configuration=aws.ecr.RepositoryImageScanningConfigurationArgs(
                scan_on_push=True,
            ),
            image_tag_mutability=config.ecr_image_mutability,
            encryption_configurations=[
                aws.ecr.RepositoryEncryptionConfigurationArgs(
                    encryption_type="AES256",
                ),
            ],
            tags=create_tags(environment, f"{repository_name}-ecr"),
            opts=child_opts,
        )

        self.lifecycle_policy = aws.ecr.LifecyclePolicy(
            f"{name}-lifecycle-policy",
            repository=self.repository.name,
            policy=json.dumps(build_lifecycle_policy(
                config.ecr_retention_days,
                config.ecr_tagged_image_count,
            )),
            opts=child_opts,
        )

        self.repository_policy = None
        if config.is_production:
            self.repository_policy = aws.ecr.RepositoryPolicy(
                f"{name}-repository-policy",
                repository=self.repository.name,
                policy=pulumi.Output.from_input(account_id).apply(
                    lambda account: json.dumps(build_repository_policy(account))
                ),
                opts=child_opts,
            )

        self.register_outputs({
            "repository_url": self.repository.repository_url,
            "repository_arn": self.repository.arn,
            "repository_name": self.repository.name,
        })

    def image_uri(self, tag: str = "latest") -> pulumi.Output[str]:
        """Image URI for a tag in this repository."""
        return self.repository.repository_url.apply(lambda url: f"{url}:{tag}")

    def get_outputs(self) -> EcrRepositoryOutputs:
        """Get ECR repository output values."""
        return EcrRepositoryOutputs(
            repository_url=self.repository.repository_url,
            repository_arn=self.repository.arn,
            repository_name=self.repository.name,
        )
