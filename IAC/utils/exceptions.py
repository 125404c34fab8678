"""
Exception hierarchy for infrastructure configuration.

Provides typed errors for CIDR planning and environment configuration.
All exceptions carry a details dict with the offending values.

Dependencies: None (pure utility layer)
System role: Fail-fast errors raised while assembling resource inputs
"""

from typing import Any


class InfrastructureError(Exception):
    """Base exception for all infrastructure configuration errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of offending values
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(InfrastructureError, ValueError):
    """Raised when stack or component configuration is invalid."""


class CidrError(InfrastructureError, ValueError):
    """Base exception for subnet planning errors."""


class InvalidCidrFormat(CidrError):
    """Raised when a CIDR string or prefix length is malformed."""

    def __init__(self, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid CIDR value {value!r}: {reason}",
            {"value": value, "reason": reason},
        )


class InsufficientAddressSpace(CidrError):
    """Raised when the requested subnets cannot fit above the minimum subnet size."""

    def __init__(self, base_prefix: int, subnet_count: int, required_prefix: int, limit: int) -> None:
        super().__init__(
            f"Cannot fit {subnet_count} subnets in a /{base_prefix} block: "
            f"would need /{required_prefix}, smallest allowed is /{limit}",
            {
                "base_prefix": base_prefix,
                "subnet_count": subnet_count,
                "required_prefix": required_prefix,
                "limit": limit,
            },
        )


class SubnetPrefixTooSmall(CidrError):
    """Raised when a subnet prefix describes a block larger than its parent."""

    def __init__(self, base_prefix: int, subnet_prefix: int) -> None:
        super().__init__(
            f"Subnet prefix /{subnet_prefix} is larger than parent block /{base_prefix}",
            {"base_prefix": base_prefix, "subnet_prefix": subnet_prefix},
        )


class SubnetCapacityExceeded(CidrError):
    """Raised when a subnet index is outside the parent block's capacity."""

    def __init__(self, subnet_index: int, capacity: int, subnet_prefix: int) -> None:
        super().__init__(
            f"Subnet index {subnet_index} out of range: only {capacity} "
            f"/{subnet_prefix} subnets available",
            {
                "subnet_index": subnet_index,
                "capacity": capacity,
                "subnet_prefix": subnet_prefix,
            },
        )
