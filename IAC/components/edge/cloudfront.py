"""
CloudFront CDN Component in Front of App Runner.

The distribution has a single custom origin: the App Runner service's
default domain, reached over HTTPS only. Everything is forwarded
(query strings, cookies, all headers) so the application sees requests as
if CloudFront were not there; only GET/HEAD/OPTIONS responses are cacheable
and the origin's Cache-Control decides how long.
"""

import re
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from IAC.configs.constants import PORTS
from IAC.utils.tags import create_tags

ORIGIN_ID = "apprunner-origin"

ALL_METHODS = ["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "POST", "DELETE"]
CACHED_METHODS = ["GET", "HEAD", "OPTIONS"]


@dataclass
class CloudFrontOutputs:
    """Output values from CloudFront component."""
    distribution_id: pulumi.Output[str]
    domain_name: pulumi.Output[str]


def origin_domain(service_url: str) -> str:
    """Strip scheme and trailing slash: App Runner reports URLs with either."""
    return re.sub(r"/$", "", re.sub(r"^https?://", "", service_url))


class CloudFrontComponent(pulumi.ComponentResource):
    """
    CloudFront distribution proxying to the App Runner service.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        service_url: pulumi.Input[str],
        price_class: str = "PriceClass_All",
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:edge:CloudFront", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.distribution = aws.cloudfront.Distribution(
            f"{name}-distribution",
            enabled=True,
            is_ipv6_enabled=True,
            price_class=price_class,
            origins=[
                aws.cloudfront.DistributionOriginArgs(
                    domain_name=pulumi.Output.from_input(service_url).apply(origin_domain),
                    origin_id=ORIGIN_ID,
                    custom_origin_config=aws.cloudfront.DistributionOriginCustomOriginConfigArgs(
                        http_port=PORTS["http"],
                        https_port=PORTS["https"],
                        origin_protocol_policy="https-only",
                        origin_ssl_protocols=["TLSv1.2"],
                    ),
                ),
            ],
            default_cache_behavior=aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
                target_origin_id=ORIGIN_ID,
                viewer_protocol_policy="redirect-to-https",
                allowed_methods=ALL_METHODS,
                cached_methods=CACHED_METHODS,
                forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
                    query_string=True,
                    headers=["*"],
                    cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                        forward="all",
                    ),
                ),
                compress=True,
            ),
            restrictions=aws.cloudfront.DistributionRestrictionsArgs(
                geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                    restriction_type="none",
                ),
            ),
            viewer_certificate=aws.cloudfront.DistributionViewerCertificateArgs(
                cloudfront_default_certificate=True,
            ),
            tags=create_tags(environment, f"{name}-distribution"),
            opts=child_opts,
        )

        self.register_outputs({
            "distribution_id": self.distribution.id,
            "domain_name": self.distribution.domain_name,
        })

    def get_outputs(self) -> CloudFrontOutputs:
        """Get CloudFront output values."""
        return CloudFrontOutputs(
            distribution_id=self.distribution.id,
            domain_name=self.distribution.domain_name,
        )
