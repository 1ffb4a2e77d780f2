"""
Artifact location for Firefox downloads.

Builds the download URL and the local cache filename for a package spec.
Pure string construction: no network or disk access.
"""

from dataclasses import dataclass
from urllib.parse import quote

from firefoxkit.core.platform import ResolvedPlatform
from firefoxkit.package.spec import PackageSpec


@dataclass(frozen=True)
class ArtifactLocation:
    """Where an artifact is downloaded from and cached as."""

    download_url: str
    cache_filename: str


def _encode(value: str) -> str:
    return quote(str(value), safe="")


def locate(spec: PackageSpec, platform: ResolvedPlatform) -> ArtifactLocation:
    """
    Locate the artifact for a spec on a platform.

    Args:
        spec: Desired package
        platform: Resolved platform

    Returns:
        ArtifactLocation with the download URL and cache filename

    Example:
        >>> location = locate(spec, resolve_platform("linux", "x86_64"))
        >>> location.download_url
        'https://download.mozilla.org/?product=38.0&os=linux64&lang=en-US'
        >>> location.cache_filename
        '38.0.tar.bz2'
    """
    download_url = (
        f"{spec.source_base_uri}/"
        f"?product={_encode(spec.version)}"
        f"&os={_encode(platform.canonical_tag)}"
        f"&lang={_encode(spec.language)}"
    )
    cache_filename = f"{spec.version}{platform.artifact_extension}"

    return ArtifactLocation(download_url=download_url, cache_filename=cache_filename)


__all__ = ["ArtifactLocation", "locate"]
