"""
Edge components in front of the App Runner service.

Components:
- WafComponent: Regional web ACL with managed rules and rate limiting
- CloudFrontComponent: CDN distribution with App Runner origin
"""

from IAC.components.edge.waf import WafComponent, WafOutputs
from IAC.components.edge.cloudfront import CloudFrontComponent, CloudFrontOutputs

__all__ = [
    "WafComponent",
    "WafOutputs",
    "CloudFrontComponent",
    "CloudFrontOutputs",
]
