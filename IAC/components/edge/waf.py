"""
WAF Component for the Public App Runner Service.

Web ACL (REGIONAL scope, App Runner is a regional resource):
  Priority 1  AWSManagedRulesCommonRuleSet      (OWASP-style common rules)
  Priority 2  AWSManagedRulesKnownBadInputsRuleSet
  Priority 10 RateLimit                         (block per source IP)

Default action is allow; only matching rules block. Every rule emits
CloudWatch metrics and sampled requests.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.constants import NAME_LIMITS
from IAC.utils.naming import ResourceNamer
from IAC.utils.tags import create_tags

DEFAULT_RATE_LIMIT = 2000

MANAGED_RULE_GROUPS = [
    ("AWSCommon", 1, "AWSManagedRulesCommonRuleSet"),
    ("KnownBadInputs", 2, "AWSManagedRulesKnownBadInputsRuleSet"),
]


@dataclass
class WafOutputs:
    """Output values from WAF component."""
    web_acl_arn: pulumi.Output[str]
    web_acl_name: pulumi.Output[str]


def _visibility(metric_name: str) -> aws.wafv2.WebAclVisibilityConfigArgs:
    return aws.wafv2.WebAclVisibilityConfigArgs(
        cloudwatch_metrics_enabled=True,
        metric_name=metric_name,
        sampled_requests_enabled=True,
    )


def _rule_visibility(metric_name: str) -> aws.wafv2.WebAclRuleVisibilityConfigArgs:
    return aws.wafv2.WebAclRuleVisibilityConfigArgs(
        cloudwatch_metrics_enabled=True,
        metric_name=metric_name,
        sampled_requests_enabled=True,
    )


def build_rules(rate_limit: int) -> list[aws.wafv2.WebAclRuleArgs]:
    """Managed rule groups followed by the per-IP rate limit rule."""
    rules = [
        aws.wafv2.WebAclRuleArgs(
            name=rule_name,
            priority=priority,
            override_action=aws.wafv2.WebAclRuleOverrideActionArgs(
                none=aws.wafv2.WebAclRuleOverrideActionNoneArgs(),
            ),
            statement=aws.wafv2.WebAclRuleStatementArgs(
                managed_rule_group_statement=aws.wafv2.WebAclRuleStatementManagedRuleGroupStatementArgs(
                    vendor_name="AWS",
                    name=group_name,
                ),
            ),
            visibility_config=_rule_visibility(rule_name),
        )
        for rule_name, priority, group_name in MANAGED_RULE_GROUPS
    ]

    rules.append(
        aws.wafv2.WebAclRuleArgs(
            name="RateLimit",
            priority=10,
            action=aws.wafv2.WebAclRuleActionArgs(
                block=aws.wafv2.WebAclRuleActionBlockArgs(),
            ),
            statement=aws.wafv2.WebAclRuleStatementArgs(
                rate_based_statement=aws.wafv2.WebAclRuleStatementRateBasedStatementArgs(
                    limit=rate_limit,
                    aggregate_key_type="IP",
                ),
            ),
            visibility_config=_rule_visibility("RateLimit"),
        )
    )
    return rules


class WafComponent(pulumi.ComponentResource):
    """
    Regional web ACL associated with an App Runner service.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        namer: ResourceNamer,
        resource_arn: pulumi.Input[str],
        rate_limit: int = DEFAULT_RATE_LIMIT,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:edge:Waf", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        acl_name = namer.aws_name("waf", NAME_LIMITS["waf_web_acl"])

        self.web_acl = aws.wafv2.WebAcl(
            f"{name}-waf",
            name=acl_name,
            scope="REGIONAL",
            default_action=aws.wafv2.WebAclDefaultActionArgs(
                allow=aws.wafv2.WebAclDefaultActionAllowArgs(),
            ),
            visibility_config=_visibility(acl_name),
            rules=build_rules(rate_limit),
            tags=create_tags(environment, acl_name),
            opts=child_opts,
        )

        self.association = aws.wafv2.WebAclAssociation(
            f"{name}-waf-assoc",
            web_acl_arn=self.web_acl.arn,
            resource_arn=resource_arn,
            opts=child_opts,
        )

        self.register_outputs({
            "web_acl_arn": self.web_acl.arn,
        })

    def get_outputs(self) -> WafOutputs:
        """Get WAF output values."""
        return WafOutputs(
            web_acl_arn=self.web_acl.arn,
            web_acl_name=self.web_acl.name,
        )
