"""
App Runner Component for the Containerised Web Service.

Request Flow:
  Internet → (optional CloudFront) → (optional WAF) → App Runner service
  App Runner → VPC connector → private subnets → RDS (when connector enabled)

Roles:
1. ECR access role (build.apprunner.amazonaws.com): pulls the image.
2. Instance role (tasks.apprunner.amazonaws.com): what the running
   container may call. X-Ray write is always attached; SSM parameter
   read is attached only when parameter paths are given.

Environment Toggles:
- Observability (X-Ray tracing) is production-only.
- Scaling and instance size come from EnvironmentConfig.

Physical names go through ResourceNamer.aws_name because App Runner caps
autoscaling and observability configuration names at 32 characters and
service and connector names at 40.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.base import EnvironmentConfig
from IAC.configs.constants import NAME_LIMITS, PORTS
from IAC.utils.exceptions import ConfigurationError
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags

HEALTH_CHECK_PATH = "/health"


@dataclass
class AppRunnerOutputs:
    """Output values from App Runner component."""
    service_arn: pulumi.Output[str]
    service_url: pulumi.Output[str]
    service_name: pulumi.Output[str]
    autoscaling_configuration_arn: pulumi.Output[str]
    instance_role_arn: pulumi.Output[str]
    vpc_connector_arn: pulumi.Output[str] | None


def _assume_role_policy(service: str) -> str:
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"Service": service},
            "Action": "sts:AssumeRole",
        }],
    })


def build_ssm_read_policy(parameter_paths: list[str], account_id: str, region: str) -> dict:
    """
    Read access to SSM parameters under the given paths.

    Each path is treated as a prefix: a trailing '*' is appended unless
    already present. The SSM-managed KMS key is included for SecureString
    decryption.
    """
    parameter_arns = [
        f"arn:aws:ssm:{region}:{account_id}:parameter"
        f"{path if path.endswith('*') else path + '*'}"
        for path in parameter_paths
    ]
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["ssm:GetParameter", "ssm:GetParameters"],
                "Resource": parameter_arns,
            },
            {
                "Effect": "Allow",
                "Action": ["kms:Decrypt"],
                "Resource": f"arn:aws:kms:{region}:{account_id}:alias/aws/ssm",
            },
        ],
    }


class AppRunnerComponent(pulumi.ComponentResource):
    """
    App Runner service running the application image from ECR.
    """

    def __init__(
        self,
        name: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        image_uri: pulumi.Input[str],
        database_url: pulumi.Input[str] | None = None,
        environment_variables: dict[str, pulumi.Input[str]] | None = None,
        vpc_subnet_ids: list[pulumi.Input[str]] | None = None,
        vpc_security_group_ids: list[pulumi.Input[str]] | None = None,
        ssm_parameter_paths: list[str] | None = None,
        account_id: pulumi.Input[str] | None = None,
        region: pulumi.Input[str] | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        if ssm_parameter_paths and (account_id is None or region is None):
            raise ConfigurationError(
                "SSM parameter access requires account_id and region",
                {"component": name, "paths": list(ssm_parameter_paths)},
            )

        super().__init__("custom:compute:AppRunner", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        environment = config.environment
        self._namer = namer

        # ECR access role
        self.access_role = aws.iam.Role(
            f"{name}-ecr-access-role",
            assume_role_policy=_assume_role_policy("build.apprunner.amazonaws.com"),
            tags=create_tags(environment, f"{name}-ecr-access-role"),
            opts=child_opts,
        )

        access_policy = aws.iam.RolePolicyAttachment(
            f"{name}-ecr-access-policy",
            role=self.access_role.name,
            policy_arn="arn:aws:iam::aws:policy/service-role/AWSAppRunnerServicePolicyForECRAccess",
            opts=child_opts,
        )

        self.instance_role = self._create_instance_role(
            name, environment, ssm_parameter_paths, account_id, region, child_opts,
        )

        # Auto Scaling Configuration
        self.autoscaling_config = aws.apprunner.AutoScalingConfigurationVersion(
            f"{name}-autoscaling",
            auto_scaling_configuration_name=self._aws_name(
                "autoscaling", NAME_LIMITS["apprunner_autoscaling"],
            ),
            max_concurrency=config.app_runner_max_concurrency,
            max_size=config.app_runner_max_size,
            min_size=config.app_runner_min_size,
            tags=create_tags(environment, f"{name}-autoscaling"),
            opts=child_opts,
        )

        # VPC Connector (only when both subnets and security groups are given)
        self.vpc_connector = None
        egress = aws.apprunner.ServiceNetworkConfigurationEgressConfigurationArgs(
            egress_type="DEFAULT",
        )
        if vpc_subnet_ids and vpc_security_group_ids:
            self.vpc_connector = aws.apprunner.VpcConnector(
                f"{name}-vpc-connector",
                vpc_connector_name=self._aws_name(
                    "vpc-connector", NAME_LIMITS["apprunner_vpc_connector"],
                ),
                subnets=vpc_subnet_ids,
                security_groups=vpc_security_group_ids,
                tags=create_tags(environment, f"{name}-vpc-connector"),
                opts=child_opts,
            )
            egress = aws.apprunner.ServiceNetworkConfigurationEgressConfigurationArgs(
                egress_type="VPC",
                vpc_connector_arn=self.vpc_connector.arn,
            )

        # Observability (production only)
        self.observability_config = None
        observability = None
        if config.is_production:
            self.observability_config = aws.apprunner.ObservabilityConfiguration(
                f"{name}-observability",
                observability_configuration_name=self._aws_name(
                    "observability", NAME_LIMITS["apprunner_observability"],
                ),
                trace_configuration=aws.apprunner.ObservabilityConfigurationTraceConfigurationArgs(
                    vendor="AWSXRAY",
                ),
                tags=create_tags(environment, f"{name}-observability"),
                opts=child_opts,
            )
            observability = aws.apprunner.ServiceObservabilityConfigurationArgs(
                observability_enabled=True,
                observability_configuration_arn=self.observability_config.arn,
            )

        runtime_variables: dict[str, pulumi.Input[str]] = {
            "APP_ENV": environment,
            "PORT": str(PORTS["app"]),
        }
        if database_url is not None:
            runtime_variables["DATABASE_URL"] = database_url
        runtime_variables.update(environment_variables or {})

        # App Runner Service
        self.service = aws.apprunner.Service(
            f"{name}-service",
            service_name=self._aws_name("service", NAME_LIMITS["apprunner_service"]),
            source_configuration=aws.apprunner.ServiceSourceConfigurationArgs(
                auto_deployments_enabled=not config.is_production,
                authentication_configuration=aws.apprunner.ServiceSourceConfigurationAuthenticationConfigurationArgs(
                    access_role_arn=self.access_role.arn,
                ),
                image_repository=aws.apprunner.ServiceSourceConfigurationImageRepositoryArgs(
                    image_identifier=image_uri,
                    image_repository_type="ECR",
                    image_configuration=aws.apprunner.ServiceSourceConfigurationImageRepositoryImageConfigurationArgs(
                        port=str(PORTS["app"]),
                        runtime_environment_variables=runtime_variables,
                    ),
                ),
            ),
            auto_scaling_configuration_arn=self.autoscaling_config.arn,
            network_configuration=aws.apprunner.ServiceNetworkConfigurationArgs(
                egress_configuration=egress,
                ingress_configuration=aws.apprunner.ServiceNetworkConfigurationIngressConfigurationArgs(
                    is_publicly_accessible=True,
                ),
            ),
            health_check_configuration=aws.apprunner.ServiceHealthCheckConfigurationArgs(
                healthy_threshold=1,
                interval=10,
                path=HEALTH_CHECK_PATH,
                protocol="HTTP",
                timeout=5,
                unhealthy_threshold=5,
            ),
            instance_configuration=aws.apprunner.ServiceInstanceConfigurationArgs(
                cpu=config.app_runner_cpu,
                memory=config.app_runner_memory,
                instance_role_arn=self.instance_role.arn,
            ),
            observability_configuration=observability,
            tags=create_tags(environment, f"{name}-service"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[access_policy]),
        )

        self.register_outputs({
            "service_arn": self.service.arn,
            "service_url": self.service.service_url,
            "service_name": self.service.service_name,
            "vpc_connector_arn": self.vpc_connector.arn if self.vpc_connector else None,
        })

    def _aws_name(self, resource: str, max_length: int) -> str:
        """Constrained physical name; logs when the name had to be shortened."""
        physical = self._namer.aws_name(resource, max_length)
        full = f"{self._namer.project}-{resource}-{self._namer.environment}"
        if physical != full:
            pulumi.log.info(f"Shortened App Runner name {full} to {physical}", resource=self)
        return physical

    def _create_instance_role(
        self,
        name: str,
        environment: str,
        ssm_parameter_paths: list[str] | None,
        account_id: pulumi.Input[str] | None,
        region: pulumi.Input[str] | None,
        opts: pulumi.ResourceOptions,
    ) -> aws.iam.Role:
        """Create the role assumed by the running container."""
        role = aws.iam.Role(
            f"{name}-instance-role",
            assume_role_policy=_assume_role_policy("tasks.apprunner.amazonaws.com"),
            tags=create_tags(environment, f"{name}-instance-role"),
            opts=opts,
        )

        aws.iam.RolePolicyAttachment(
            f"{name}-instance-ecr-policy",
            role=role.name,
            policy_arn="arn:aws:iam::aws:policy/service-role/AWSAppRunnerServicePolicyForECRAccess",
            opts=opts,
        )

        aws.iam.RolePolicyAttachment(
            f"{name}-xray-write",
            role=role.name,
            policy_arn="arn:aws:iam::aws:policy/AWSXRayDaemonWriteAccess",
            opts=opts,
        )

        if ssm_parameter_paths:
            paths = list(ssm_parameter_paths)
            ssm_policy = aws.iam.Policy(
                f"{name}-ssm-read",
                policy=pulumi.Output.all(account_id, region).apply(
                    lambda args: json.dumps(build_ssm_read_policy(paths, args[0], args[1]))
                ),
                tags=create_tags(environment, f"{name}-ssm-read"),
                opts=opts,
            )
            aws.iam.RolePolicyAttachment(
                f"{name}-ssm-read-attach",
                role=role.name,
                policy_arn=ssm_policy.arn,
                opts=opts,
            )

        return role

    def get_outputs(self) -> AppRunnerOutputs:
        """Get App Runner output values."""
        return AppRunnerOutputs(
            service_arn=self.service.arn,
            service_url=self.service.service_url,
            service_name=self.service.service_name,
            autoscaling_configuration_arn=self.autoscaling_config.arn,
            instance_role_arn=self.instance_role.arn,
            vpc_connector_arn=self.vpc_connector.arn if self.vpc_connector else None,
        )
