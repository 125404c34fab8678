"""
Security Groups Component for Network Access Control.

Creates the identity badges that other components reference:
- App Runner connector SG: attached to the App Runner VPC connector.
  Egress-only; used as the source SG for database ingress.

The database SG lives with the RDS component, which limits ingress on
5432 to the SGs passed in here.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.utils.tags import create_tags


@dataclass
class SecurityGroupOutputs:
    """Output values from security groups component."""
    app_runner_sg_id: pulumi.Output[str]


class SecurityGroupsComponent(pulumi.ComponentResource):
    """
    Security groups for compute that reaches into the VPC.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        vpc_id: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:networking:SecurityGroups", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.app_runner_sg = aws.ec2.SecurityGroup(
            f"{name}-apprunner-sg",
            description="App Runner VPC connector egress",
            vpc_id=vpc_id,
            egress=[
                aws.ec2.SecurityGroupEgressArgs(
                    protocol="-1",
                    from_port=0,
                    to_port=0,
                    cidr_blocks=["0.0.0.0/0"],
                    description="All outbound",
                ),
            ],
            tags=create_tags(environment, f"{name}-apprunner-sg"),
            opts=child_opts,
        )

        self.register_outputs({
            "app_runner_sg_id": self.app_runner_sg.id,
        })

    def get_outputs(self) -> SecurityGroupOutputs:
        """Get security group output values."""
        return SecurityGroupOutputs(
            app_runner_sg_id=self.app_runner_sg.id,
        )
