"""
GitHub Actions OIDC Role Component for CI/CD Deployments.

Trust Chain:
  GitHub Actions job
    → requests an OIDC token from token.actions.githubusercontent.com
    → sts:AssumeRoleWithWebIdentity on this role
    → AWS checks aud == sts.amazonaws.com and sub matches an allowed subject

Allowed subjects (StringLike on <provider>:sub):
  repo:<org>/<repo>:ref:refs/heads/<branch>      one per branch
  repo:<org>/<repo>:environment:<environment>    one per GitHub environment

Permissions:
- ReadOnlyAccess managed policy plus any additional managed policies.
- Inline deploy policy: push to the given ECR repositories, deploy the
  App Runner services, Pulumi S3 state, App Runner log groups, SSM
  parameters under /<app>/<environment>/ and the AWS-managed KMS keys.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.constants import NAME_LIMITS
from IAC.utils.exceptions import ConfigurationError
from IAC.utils.naming import build_name
from IAC.utils.tags import create_tags

GITHUB_OIDC_URL = "https://token.actions.githubusercontent.com"
GITHUB_OIDC_AUDIENCE = "sts.amazonaws.com"
GITHUB_OIDC_THUMBPRINTS = [
    "6938fd4d98bab03faadb97b34396831e3780aea1",
    "1c58a3a8518e8759bf075b76b750d4f2df264fcd",
]
READ_ONLY_POLICY_ARN = "arn:aws:iam::aws:policy/ReadOnlyAccess"


@dataclass
class GitHubActionsRoleOutputs:
    """Output values from GitHub Actions role component."""
    role_arn: pulumi.Output[str]
    role_name: pulumi.Output[str]
    oidc_provider_arn: pulumi.Output[str]


def build_subjects(
    github_org: str,
    github_repo: str,
    branches: list[str] | tuple[str, ...] = (),
    environments: list[str] | tuple[str, ...] = (),
) -> list[str]:
    """OIDC subject claims allowed to assume the role, de-duplicated in order."""
    subjects = [f"repo:{github_org}/{github_repo}:ref:refs/heads/{branch}" for branch in branches]
    subjects += [f"repo:{github_org}/{github_repo}:environment:{env}" for env in environments]
    return list(dict.fromkeys(subjects))


def build_trust_policy(
    oidc_provider_arn: str,
    github_org: str,
    github_repo: str,
    branches: list[str] | tuple[str, ...] = (),
    environments: list[str] | tuple[str, ...] = (),
) -> dict:
    """
    Assume-role policy for GitHub's OIDC provider.

    Args:
        oidc_provider_arn: ARN of the IAM OIDC provider
        github_org: Organisation or user owning the repository
        github_repo: Repository name
        branches: Branches allowed to assume the role
        environments: GitHub environments allowed to assume the role

    Returns:
        IAM policy document
    """
    # arn:aws:iam::<account>:oidc-provider/token.actions.githubusercontent.com
    provider = oidc_provider_arn.split("/", 1)[1] if "/" in oidc_provider_arn else oidc_provider_arn
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Federated": oidc_provider_arn},
                "Action": "sts:AssumeRoleWithWebIdentity",
                "Condition": {
                    "StringEquals": {f"{provider}:aud": GITHUB_OIDC_AUDIENCE},
                    "StringLike": {
                        f"{provider}:sub": build_subjects(
                            github_org, github_repo, branches, environments,
                        ),
                    },
                },
            },
        ],
    }


def build_deploy_policy(
    app_name: str,
    environment: str,
    account_id: str,
    region: str,
    ecr_repository_arns: list[str],
) -> dict:
    """Inline policy for image pushes and App Runner deployments."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["ecr:GetAuthorizationToken"],
                "Resource": "*",
            },
            {
                "Effect": "Allow",
                "Action": [
                    "ecr:BatchCheckLayerAvailability",
                    "ecr:GetDownloadUrlForLayer",
                    "ecr:BatchGetImage",
                    "ecr:InitiateLayerUpload",
                    "ecr:UploadLayerPart",
                    "ecr:CompleteLayerUpload",
                    "ecr:PutImage",
                ],
                "Resource": list(ecr_repository_arns),
            },
            {
                "Effect": "Allow",
                "Action": [
                    "apprunner:DescribeService",
                    "apprunner:UpdateService",
                    "apprunner:StartDeployment",
                    "apprunner:ListOperations",
                    "apprunner:DescribeOperation",
                ],
                "Resource": [f"arn:aws:apprunner:{region}:{account_id}:service/{app_name}-*"],
            },
            {
                "Effect": "Allow",
                "Action": ["s3:GetObject", "s3:PutObject", "s3:DeleteObject", "s3:ListBucket"],
                "Resource": [
                    f"arn:aws:s3:::pulumi-{account_id}-{region}",
                    f"arn:aws:s3:::pulumi-{account_id}-{region}/*",
                ],
            },
            {
                "Effect": "Allow",
                "Action": [
                    "logs:CreateLogGroup",
                    "logs:CreateLogStream",
                    "logs:PutLogEvents",
                    "logs:DescribeLogGroups",
                    "logs:DescribeLogStreams",
                ],
                "Resource": [
                    f"arn:aws:logs:{region}:{account_id}:log-group:/aws/apprunner/{app_name}-*",
                    f"arn:aws:logs:{region}:{account_id}:log-group:/aws/apprunner/{app_name}-*:*",
                ],
            },
            {
                "Effect": "Allow",
                "Action": ["ssm:GetParameter", "ssm:GetParameters", "ssm:GetParametersByPath"],
                "Resource": [
                    f"arn:aws:ssm:{region}:{account_id}:parameter/{app_name}/{environment}/*",
                ],
            },
            {
                "Effect": "Allow",
                "Action": ["kms:Decrypt", "kms:DescribeKey"],
                "Resource": [
                    f"arn:aws:kms:{region}:{account_id}:alias/aws/ssm",
                    f"arn:aws:kms:{region}:{account_id}:alias/aws/secretsmanager",
                ],
            },
        ],
    }


class GitHubActionsRoleComponent(pulumi.ComponentResource):
    """
    OIDC provider and deploy role for GitHub Actions.
    """

    def __init__(
        self,
        name: str,
        app_name: str,
        environment: str,
        github_org: str,
        github_repo: str,
        ecr_repository_arns: list[pulumi.Input[str]],
        account_id: pulumi.Input[str],
        region: pulumi.Input[str],
        github_branches: list[str] | tuple[str, ...] = (),
        github_environments: list[str] | tuple[str, ...] = (),
        additional_policy_arns: list[str] | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        if not github_branches and not github_environments:
            raise ConfigurationError(
                "GitHubActionsRole requires at least one GitHub branch or environment",
                {"component": name, "repository": f"{github_org}/{github_repo}"},
            )
        if not ecr_repository_arns:
            raise ConfigurationError(
                "GitHubActionsRole requires at least one ECR repository ARN",
                {"component": name},
            )

        super().__init__("custom:security:GitHubActionsRole", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        role_name = build_name(f"GitHubActions-{app_name}", environment, NAME_LIMITS["iam_role"])
        branches = list(github_branches)
        environments = list(github_environments)

        self.oidc_provider = aws.iam.OpenIdConnectProvider(
            f"{name}-github-oidc",
            url=GITHUB_OIDC_URL,
            client_id_lists=[GITHUB_OIDC_AUDIENCE],
            thumbprint_lists=GITHUB_OIDC_THUMBPRINTS,
            tags=create_tags(environment, f"{name}-github-oidc"),
            opts=child_opts,
        )

        self.role = aws.iam.Role(
            f"{name}-github-actions-role",
            name=role_name,
            assume_role_policy=self.oidc_provider.arn.apply(
                lambda arn: json.dumps(
                    build_trust_policy(arn, github_org, github_repo, branches, environments)
                )
            ),
            tags=create_tags(environment, role_name),
            opts=child_opts,
        )

        for i, policy_arn in enumerate([READ_ONLY_POLICY_ARN, *(additional_policy_arns or [])]):
            aws.iam.RolePolicyAttachment(
                f"{name}-managed-policy-{i}",
                role=self.role.name,
                policy_arn=policy_arn,
                opts=child_opts,
            )

        self.deploy_policy = aws.iam.RolePolicy(
            f"{name}-deploy-policy",
            name="ECRAndAppRunnerPolicy",
            role=self.role.id,
            policy=pulumi.Output.all(
                account_id,
                region,
                pulumi.Output.all(*ecr_repository_arns),
            ).apply(lambda args: json.dumps(
                build_deploy_policy(app_name, environment, args[0], args[1], args[2])
            )),
            opts=child_opts,
        )

        pulumi.log.info(
            f"GitHub Actions role {role_name} trusts "
            f"{len(build_subjects(github_org, github_repo, branches, environments))} subject(s)",
            resource=self,
        )

        self.register_outputs({
            "role_arn": self.role.arn,
            "role_name": self.role.name,
            "oidc_provider_arn": self.oidc_provider.arn,
        })

    def get_outputs(self) -> GitHubActionsRoleOutputs:
        """Get GitHub Actions role output values."""
        return GitHubActionsRoleOutputs(
            role_arn=self.role.arn,
            role_name=self.role.name,
            oidc_provider_arn=self.oidc_provider.arn,
        )
