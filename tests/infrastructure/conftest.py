"""Pytest fixtures and Pulumi mocks for infrastructure tests."""

from pathlib import Path

import pulumi
import pytest

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"


class InfraMocks(pulumi.runtime.Mocks):
    """
    Resource mocks returning the inputs plus the computed outputs components read.

    State keys use the provider's camelCase property names.
    """

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        # aws:wafv2/webAcl:WebAcl -> wafv2
        service = args.typ.split(":")[1].split("/")[0]
        outputs = dict(args.inputs)
        outputs.setdefault("arn", f"arn:aws:{service}:{REGION}:{ACCOUNT_ID}:{args.name}")

        if args.typ == "aws:apprunner/service:Service":
            outputs["serviceUrl"] = f"{args.name}.{REGION}.awsapprunner.com"
        elif args.typ == "aws:ecr/repository:Repository":
            outputs["repositoryUrl"] = (
                f"{ACCOUNT_ID}.dkr.ecr.{REGION}.amazonaws.com/{args.inputs.get('name', args.name)}"
            )
        elif args.typ == "aws:rds/instance:Instance":
            outputs["address"] = f"{args.name}.abc123.{REGION}.rds.amazonaws.com"
            outputs["endpoint"] = f"{outputs['address']}:5432"
        elif args.typ == "aws:cloudfront/distribution:Distribution":
            outputs["domainName"] = f"{args.name}.cloudfront.net"
        elif args.typ == "aws:iam/openIdConnectProvider:OpenIdConnectProvider":
            outputs["arn"] = (
                f"arn:aws:iam::{ACCOUNT_ID}:oidc-provider/token.actions.githubusercontent.com"
            )

        return [f"{args.name}-id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


pulumi.runtime.set_mocks(InfraMocks(), preview=False)


@pytest.fixture
def iac_project_root():
    """Return the IAC project root directory."""
    return Path(__file__).parent.parent.parent / "IAC"


@pytest.fixture
def python_files_in_iac(iac_project_root):
    """Return all Python files in IAC directory."""
    return [f for f in iac_project_root.rglob("*.py") if "__pycache__" not in str(f)]
