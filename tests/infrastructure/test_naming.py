"""
Tests for constrained AWS resource names.

Validates:
1. build_name length, charset and separator guarantees (property-based)
2. Hash shrinking keeps truncated names distinct
3. Suffix handling when the limit is tight
4. ResourceNamer logical names, physical names and SSM paths
"""

import hashlib
import re

import pytest
from hypothesis import assume, given, settings, strategies as st

from IAC.configs.constants import NAME_LIMITS
from IAC.utils.naming import ResourceNamer, build_name, to_rds_name

VALID_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*")
DOUBLED_SEPARATORS = ("--", "__", "-_", "_-")


def assert_valid_name(name: str, max_length: int) -> None:
    assert len(name) <= max(max_length, 4)
    assert len(name) >= 4
    assert VALID_NAME.fullmatch(name), name
    assert not any(sep in name for sep in DOUBLED_SEPARATORS), name
    assert name[-1] not in "-_", name


class TestBuildName:
    """Tests for build_name."""

    def test_short_name_is_unchanged(self):
        """Names within the limit are joined as-is."""
        assert build_name("my-app-autoscaling", "prod", 32) == "my-app-autoscaling-prod"

    def test_no_suffix(self):
        """Without a suffix the base is returned sanitized."""
        assert build_name("my-app", "", 64) == "my-app"

    def test_long_base_is_shrunk_with_hash(self):
        """A long base keeps a readable prefix, a hash and the full suffix."""
        base = "my-very-long-application-name-that-exceeds-limits"
        expected_hash = hashlib.sha256(base.encode("utf-8")).hexdigest()[:4]

        name = build_name(base, "autoscaling-prod", 32)

        assert name == f"my-very-lo-{expected_hash}-autoscaling-prod"
        assert len(name) == 32
        assert_valid_name(name, 32)

    def test_invalid_characters_are_replaced(self):
        """Characters outside [A-Za-z0-9_-] become single hyphens."""
        assert build_name("my app!!service", "dev", 64) == "my-app-service-dev"

    def test_separator_runs_collapse_to_first(self):
        """Runs of separators collapse to their first character."""
        assert build_name("my_-app--svc", "", 64) == "my_app-svc"

    def test_leading_separators_are_removed(self):
        """Names never start with a separator."""
        assert build_name("--_api", "dev", 64) == "api-dev"

    def test_empty_base_uses_fallback(self):
        """An empty or all-invalid base falls back to 'res'."""
        assert build_name("", "dev", 64) == "res-dev"
        assert build_name("!!!", "", 64) == "resx"

    def test_short_result_is_padded(self):
        """Results shorter than four characters are padded with 'x'."""
        assert build_name("ab", "", 64) == "abxx"

    def test_tiny_limit_is_raised_to_minimum(self):
        """A limit below four is treated as four."""
        name = build_name("service", "prod", 2)

        assert len(name) == 4
        assert_valid_name(name, 4)

    def test_long_suffix_keeps_its_tail(self):
        """When the suffix crowds out the base, the suffix tail survives."""
        name = build_name("api", "very-long-environment-suffix-prod", 16)

        assert len(name) <= 16
        assert name.endswith("prod")
        assert name.startswith("api")
        assert_valid_name(name, 16)

    def test_deterministic(self):
        """The same inputs always produce the same name."""
        base = "x" * 100
        assert build_name(base, "staging", 40) == build_name(base, "staging", 40)

    def test_shared_prefix_names_differ(self):
        """Two long bases with a common prefix get different hashes."""
        prefix = "application-service-component-" * 3
        first = build_name(prefix + "alpha", "prod", 32)
        second = build_name(prefix + "beta", "prod", 32)

        assert first != second
        assert first[:10] == second[:10]


name_text = st.text(
    alphabet=st.characters(min_codepoint=32, max_codepoint=126),
    max_size=120,
)


class TestBuildNameProperties:
    """Property-based tests for build_name."""

    @settings(max_examples=300)
    @given(name_text, name_text, st.integers(min_value=0, max_value=256))
    def test_output_is_always_valid(self, base, suffix, max_length):
        """Every output respects the limit, charset and separator rules."""
        assert_valid_name(build_name(base, suffix, max_length), max_length)

    @settings(max_examples=100)
    @given(name_text, name_text, st.integers(min_value=4, max_value=128))
    def test_output_is_deterministic(self, base, suffix, max_length):
        """Repeated calls agree."""
        assert build_name(base, suffix, max_length) == build_name(base, suffix, max_length)

    @settings(max_examples=100)
    @given(
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=40, max_size=60),
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=20),
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=20),
    )
    def test_truncated_names_do_not_collide(self, prefix, tail_a, tail_b):
        """Distinct long bases sharing a prefix longer than the limit stay distinct."""
        assume(tail_a != tail_b)

        assert build_name(prefix + tail_a, "", 32) != build_name(prefix + tail_b, "", 32)


class TestResourceNamer:
    """Tests for ResourceNamer."""

    def test_logical_name(self):
        """Logical names are {project}-{environment}-{resource}."""
        namer = ResourceNamer(project="my-app", environment="dev")

        assert namer.name("vpc") == "my-app-dev-vpc"
        assert namer.name("") == "my-app-dev"

    def test_aws_name_ends_with_environment(self):
        """Physical names put the environment last."""
        namer = ResourceNamer(project="my-app", environment="prod")

        assert namer.aws_name("service", 40) == "my-app-service-prod"
        assert namer.aws_name("", 256) == "my-app-prod"

    @pytest.mark.parametrize("resource, limit_key", [
        ("autoscaling", "apprunner_autoscaling"),
        ("observability", "apprunner_observability"),
        ("vpc-connector", "apprunner_vpc_connector"),
        ("service", "apprunner_service"),
        ("postgres", "rds_identifier"),
        ("waf", "waf_web_acl"),
    ])
    def test_aws_name_respects_service_limits(self, resource, limit_key):
        """Long project names still fit every service limit."""
        namer = ResourceNamer(
            project="my-very-long-application-name-that-exceeds-limits",
            environment="staging",
        )
        limit = NAME_LIMITS[limit_key]
        name = namer.aws_name(resource, limit)

        assert_valid_name(name, limit)
        assert name.endswith("staging")

    def test_secret_path(self):
        """SSM paths are scoped by project and environment."""
        namer = ResourceNamer(project="my-app", environment="staging")

        assert namer.secret_path("db-password") == "/my-app/staging/db-password"


RDS_NAME = re.compile(r"[a-z][a-z0-9]*(-[a-z0-9]+)*")


class TestRdsNames:
    """Tests for RDS identifier and parameter group names."""

    @pytest.mark.parametrize("project, expected", [
        ("my-app", "my-app-postgres-dev"),
        ("My_App", "my-app-postgres-dev"),
        ("1app", "db-1app-postgres-dev"),
        ("_9lives", "db-9lives-postgres-dev"),
    ])
    def test_rds_name(self, project, expected):
        """Underscores become hyphens and names start with a letter."""
        namer = ResourceNamer(project=project, environment="dev")

        assert namer.rds_name("postgres", NAME_LIMITS["rds_identifier"]) == expected

    def test_prefixed_name_keeps_environment(self):
        """Room for the prefix is reserved, so truncation never drops the environment."""
        namer = ResourceNamer(project="1" * 80, environment="prod")
        name = namer.rds_name("postgres", NAME_LIMITS["rds_identifier"])

        assert len(name) <= NAME_LIMITS["rds_identifier"]
        assert name.startswith("db-")
        assert name.endswith("-prod")

    @given(name=st.text(alphabet="abcXYZ019_-", min_size=1, max_size=80))
    @settings(max_examples=200)
    def test_converted_names_match_rds_pattern(self, name):
        """Any constrained name converts to a valid RDS name within the limit."""
        converted = to_rds_name(build_name(name, "dev", 60), 63)

        assert RDS_NAME.fullmatch(converted), converted
        assert len(converted) <= 63
