"""
VPC Component Resource for Network Infrastructure.

Steps & Architecture:
1. VPC (small /24 per environment by default): the isolated network container.
2. Internet Gateway (IGW): the "door" to the internet for public subnets.
3. Subnets, derived from the VPC CIDR with plan_subnets(cidr, 2 * az_count):
   - Public (indices 0..n-1): one per AZ, the first hosts the NAT gateway.
   - Private (indices n..2n-1): RDS and the App Runner VPC connector.
   With a /24 and two AZs this gives .0/26 and .64/26 public,
   .128/26 and .192/26 private.
4. NAT Gateway: a single gateway in the first public subnet, shared by all
   private subnets.
5. Route Tables:
   - Public RT: 0.0.0.0/0 -> IGW.
   - Private RT: 0.0.0.0/0 -> NAT gateway.
6. Associations: explicitly linking subnets to route tables.

Subnet layout is pure arithmetic on the configured CIDR, so re-running the
program against the same config never moves an existing subnet.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.utils.cidr import plan_subnets
from IAC.utils.tags import create_tags


@dataclass
class VpcOutputs:
    """Output values from VPC component."""
    vpc_id: pulumi.Output[str]
    default_security_group_id: pulumi.Output[str]
    public_subnet_ids: list[pulumi.Output[str]]
    private_subnet_ids: list[pulumi.Output[str]]
    nat_gateway_id: pulumi.Output[str]
    private_route_table_id: pulumi.Output[str]


class VpcComponent(pulumi.ComponentResource):
    """
    VPC component with public/private subnets per AZ and a NAT gateway.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        cidr_block: str,
        availability_zones: list[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        # Planning errors raise before any resource is registered
        az_count = len(availability_zones)
        subnet_plan = plan_subnets(cidr_block, 2 * az_count)

        super().__init__("custom:networking:Vpc", name, None, opts)
        self.environment = environment

        child_opts = pulumi.ResourceOptions(parent=self)

        self.subnet_plan = subnet_plan
        self.public_cidrs = list(subnet_plan.blocks[:az_count])
        self.private_cidrs = list(subnet_plan.blocks[az_count:])

        pulumi.log.debug(
            f"Subnet plan for {cidr_block}: /{self.subnet_plan.prefix} x {len(self.subnet_plan)}",
            resource=self,
        )

        # Create VPC
        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=cidr_block,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags=create_tags(environment, f"{name}-vpc"),
            opts=child_opts,
        )

        # Create Internet Gateway
        self.igw = aws.ec2.InternetGateway(
            f"{name}-igw",
            vpc_id=self.vpc.id,
            tags=create_tags(environment, f"{name}-igw"),
            opts=child_opts,
        )

        self.public_subnets: list[aws.ec2.Subnet] = []
        self.private_subnets: list[aws.ec2.Subnet] = []

        for i, az in enumerate(availability_zones):
            self.public_subnets.append(aws.ec2.Subnet(
                f"{name}-public-{i}",
                vpc_id=self.vpc.id,
                cidr_block=self.public_cidrs[i],
                availability_zone=az,
                map_public_ip_on_launch=True,
                tags=create_tags(environment, f"{name}-public-{i}", Type="public"),
                opts=child_opts,
            ))

            self.private_subnets.append(aws.ec2.Subnet(
                f"{name}-private-{i}",
                vpc_id=self.vpc.id,
                cidr_block=self.private_cidrs[i],
                availability_zone=az,
                tags=create_tags(environment, f"{name}-private-{i}", Type="private"),
                opts=child_opts,
            ))

        # NAT Gateway in the first public subnet
        self.nat_eip = aws.ec2.Eip(
            f"{name}-nat-eip",
            domain="vpc",
            tags=create_tags(environment, f"{name}-nat-eip"),
            opts=child_opts,
        )

        self.nat_gateway = aws.ec2.NatGateway(
            f"{name}-nat",
            allocation_id=self.nat_eip.id,
            subnet_id=self.public_subnets[0].id,
            tags=create_tags(environment, f"{name}-nat"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.igw]),
        )

        # Create route tables
        self._create_route_tables(name, child_opts)

        self.register_outputs({
            "vpc_id": self.vpc.id,
            "public_subnet_ids": [s.id for s in self.public_subnets],
            "private_subnet_ids": [s.id for s in self.private_subnets],
            "nat_gateway_id": self.nat_gateway.id,
            "private_route_table_id": self.private_rt.id,
        })

    def _create_route_tables(
        self,
        name: str,
        opts: pulumi.ResourceOptions,
    ) -> None:
        """Create route tables for public and private subnets."""
        self.public_rt = aws.ec2.RouteTable(
            f"{name}-public-rt",
            vpc_id=self.vpc.id,
            routes=[
                aws.ec2.RouteTableRouteArgs(
                    cidr_block="0.0.0.0/0",
                    gateway_id=self.igw.id,
                ),
            ],
            tags=create_tags(self.environment, f"{name}-public-rt"),
            opts=opts,
        )

        for i, subnet in enumerate(self.public_subnets):
            aws.ec2.RouteTableAssociation(
                f"{name}-public-rta-{i}",
                subnet_id=subnet.id,
                route_table_id=self.public_rt.id,
                opts=opts,
            )

        self.private_rt = aws.ec2.RouteTable(
            f"{name}-private-rt",
            vpc_id=self.vpc.id,
            routes=[
                aws.ec2.RouteTableRouteArgs(
                    cidr_block="0.0.0.0/0",
                    nat_gateway_id=self.nat_gateway.id,
                ),
            ],
            tags=create_tags(self.environment, f"{name}-private-rt"),
            opts=opts,
        )

        for i, subnet in enumerate(self.private_subnets):
            aws.ec2.RouteTableAssociation(
                f"{name}-private-rta-{i}",
                subnet_id=subnet.id,
                route_table_id=self.private_rt.id,
                opts=opts,
            )

    def get_outputs(self) -> VpcOutputs:
        """Get VPC output values."""
        return VpcOutputs(
            vpc_id=self.vpc.id,
            default_security_group_id=self.vpc.default_security_group_id,
            public_subnet_ids=[s.id for s in self.public_subnets],
            private_subnet_ids=[s.id for s in self.private_subnets],
            nat_gateway_id=self.nat_gateway.id,
            private_route_table_id=self.private_rt.id,
        )
