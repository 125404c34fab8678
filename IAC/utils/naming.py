"""
Resource naming conventions for consistent AWS resource names.

Logical (Pulumi) names follow {project}-{environment}-{resource}.
Physical AWS names go through build_name(), which fits them into the
service's length and charset rules:

  build_name("my-app-autoscaling", "prod", 32) -> "my-app-autoscaling-prod"
  build_name("<49 chars>", "autoscaling-prod", 32)
      -> "my-very-lo-1a2b-autoscaling-prod"   (prefix + hash + suffix)
"""

import hashlib
import re
from dataclasses import dataclass

MIN_NAME_LENGTH = 4
FALLBACK_TOKEN = "res"
PAD_CHAR = "x"

MIN_HASH_LENGTH = 2
MAX_HASH_LENGTH = 6

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_SEPARATOR_RUNS = re.compile(r"[-_]{2,}")
_LEADING_NON_ALNUM = re.compile(r"^[^A-Za-z0-9]+")
_SEPARATORS = "-_"

RDS_NAME_PREFIX = "db-"
_RDS_INVALID_RUNS = re.compile(r"[^a-z0-9]+")


def _sanitize(value: str) -> str:
    value = _INVALID_CHARS.sub("-", value)
    value = _SEPARATOR_RUNS.sub(lambda match: match.group(0)[0], value)
    return value.strip(_SEPARATORS)


def _ensure_valid_start(value: str) -> str:
    value = _LEADING_NON_ALNUM.sub("", value)
    return value or FALLBACK_TOKEN


def _content_hash(value: str, length: int) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]


def _hash_length(budget: int) -> int:
    # Shorter hashes when the budget is tight, leaving room for the readable prefix
    return max(MIN_HASH_LENGTH, min(MAX_HASH_LENGTH, (budget - 1) // 3))


def _allocate_suffix(suffix: str, max_length: int) -> tuple[str, int]:
    """Return the (possibly shortened) suffix and the budget left for the base."""
    if not suffix:
        return "", max_length

    base_budget = max_length - len(suffix) - 1
    if base_budget >= MIN_NAME_LENGTH:
        return suffix, base_budget

    # Keep the tail: it usually carries the environment name
    suffix_budget = max_length - MIN_NAME_LENGTH - 1
    if suffix_budget <= 0:
        return "", max_length

    suffix = suffix[-suffix_budget:].lstrip(_SEPARATORS)
    if not suffix:
        return "", max_length
    return suffix, max_length - len(suffix) - 1


def _shrink_with_hash(base: str, original: str, budget: int) -> str:
    if len(base) <= budget:
        return base

    hash_length = _hash_length(budget)
    prefix = base[: budget - hash_length - 1].rstrip(_SEPARATORS)
    return f"{prefix}-{_content_hash(original, hash_length)}"


def build_name(base: str, suffix: str = "", max_length: int = 64) -> str:
    """
    Build a name that satisfies AWS length and charset rules.

    The result is never empty, starts with an alphanumeric character and
    contains only [A-Za-z0-9_-] with no doubled or trailing separators.
    When the base has to be truncated, a short hash of the original base is
    appended so that long names sharing a prefix stay distinct.

    The length guarantee (at most max_length characters) only holds for
    max_length >= 4. Smaller limits are raised to 4, so the result can be
    longer than the limit the caller passed.

    Args:
        base: Human-readable name (e.g., 'my-app-service')
        suffix: Optional suffix, usually the environment (e.g., 'prod')
        max_length: Maximum allowed length (values below 4 are treated as 4)

    Returns:
        Deterministic constrained name
    """
    max_length = max(max_length, MIN_NAME_LENGTH)

    clean_base = _ensure_valid_start(_sanitize(base))
    clean_suffix, base_budget = _allocate_suffix(_sanitize(suffix), max_length)
    clean_base = _shrink_with_hash(clean_base, base, base_budget)

    joined = f"{clean_base}-{clean_suffix}" if clean_suffix else clean_base
    name = _ensure_valid_start(_sanitize(joined))

    if len(name) > max_length:
        name = name[:max_length].rstrip(_SEPARATORS)

    if len(name) < MIN_NAME_LENGTH:
        name = name.ljust(MIN_NAME_LENGTH, PAD_CHAR)

    return name


def to_rds_name(name: str, max_length: int) -> str:
    """
    Convert a constrained name into an RDS identifier.

    RDS instance identifiers and parameter group names allow only
    lowercase letters, digits and single hyphens, and must start with a
    letter. Names that start with a digit get the 'db-' prefix.

    Args:
        name: Name produced by build_name
        max_length: RDS name length limit

    Returns:
        Name matching [a-z][a-z0-9]*(-[a-z0-9]+)*
    """
    name = _RDS_INVALID_RUNS.sub("-", name.lower()).strip("-")
    if not name[:1].isalpha():
        name = f"{RDS_NAME_PREFIX}{name}" if name else RDS_NAME_PREFIX + FALLBACK_TOKEN
    return name[:max_length].rstrip("-")


@dataclass(frozen=True)
class ResourceNamer:
    """
    Generates consistent resource names for AWS resources.

    Attributes:
        project: Project identifier
        environment: Deployment environment (dev, staging, prod)
    """
    project: str
    environment: str

    def name(self, resource: str) -> str:
        """
        Generate a logical Pulumi resource name.

        Args:
            resource: Resource identifier (e.g., 'vpc', 'db-sg')

        Returns:
            Formatted resource name
        """
        if not resource:
            return f"{self.project}-{self.environment}"
        return f"{self.project}-{self.environment}-{resource}"

    def aws_name(self, resource: str, max_length: int) -> str:
        """
        Generate a physical AWS name within the service's length limit.

        Args:
            resource: Resource identifier (e.g., 'autoscaling')
            max_length: Service name length limit (see NAME_LIMITS)

        Returns:
            Constrained name ending in the environment
        """
        base = f"{self.project}-{resource}" if resource else self.project
        return build_name(base, self.environment, max_length)

    def rds_name(self, resource: str, max_length: int) -> str:
        """
        Generate an RDS identifier or parameter group name.

        Room for the 'db-' prefix is reserved up front so the environment
        suffix survives when the prefix is needed.
        """
        name = self.aws_name(resource, max_length - len(RDS_NAME_PREFIX))
        return to_rds_name(name, max_length)

    def secret_path(self, name: str) -> str:
        """
        Generate an SSM parameter path.

        Args:
            name: Parameter identifier

        Returns:
            Parameter path with project and environment prefix
        """
        return f"/{self.project}/{self.environment}/{name}"
