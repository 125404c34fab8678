"""
Image URI handling for the App Runner image source.

Decides which tag to point App Runner at before the first CI build has
pushed an image, based on the configured ecrImageUri.
"""

from dataclasses import dataclass

DEFAULT_PLACEHOLDER_TAG = "latest"


@dataclass(frozen=True)
class PlaceholderSeedConfig:
    """
    Whether to seed a placeholder image and under which tag.

    Attributes:
        enabled: Seed a placeholder image into the repository
        tag: Tag to use when enabled
        warning: Explanation when seeding is disabled
    """
    enabled: bool
    tag: str | None = None
    warning: str | None = None


def _is_digest_reference(image_uri: str) -> bool:
    return "@" in image_uri


def _extract_tag(image_uri: str) -> str | None:
    last_colon = image_uri.rfind(":")
    last_slash = image_uri.rfind("/")

    # A colon before the last slash belongs to a registry port, not a tag
    if last_colon == -1 or last_colon < last_slash:
        return None

    tag = image_uri[last_colon + 1:].strip()
    return tag or None


def derive_placeholder_seed_config(image_uri: str | None) -> PlaceholderSeedConfig:
    """
    Derive placeholder seeding from a configured image URI.

    Args:
        image_uri: Configured image URI, or None

    Returns:
        PlaceholderSeedConfig: disabled for digest references, otherwise
        enabled with the URI's tag (or 'latest')
    """
    if not image_uri:
        return PlaceholderSeedConfig(enabled=True, tag=DEFAULT_PLACEHOLDER_TAG)

    if _is_digest_reference(image_uri):
        return PlaceholderSeedConfig(
            enabled=False,
            warning=(
                "Skipping placeholder image seeding because configured image URI "
                f'"{image_uri}" uses a digest reference.'
            ),
        )

    return PlaceholderSeedConfig(
        enabled=True,
        tag=_extract_tag(image_uri) or DEFAULT_PLACEHOLDER_TAG,
    )
