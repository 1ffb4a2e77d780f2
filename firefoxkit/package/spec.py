"""
Desired state of a single Firefox install.

A PackageSpec describes the desired state for one version and language on
one host. It is built fresh for every action and never mutated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from firefoxkit.core.directory import default_install_path
from firefoxkit.core.platform import ResolvedPlatform

DEFAULT_URI = "https://download.mozilla.org"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_INI_SOURCE = "windows.ini.j2"
DEFAULT_INI_SCOPE = "firefoxkit"


class Action(Enum):
    """Actions the dispatcher accepts."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    REMOVE = "remove"


@dataclass(frozen=True)
class PackageSpec:
    """
    Desired state of a Firefox install.

    Attributes:
        version: Firefox version or product alias (e.g. '38.0', '38.0esr')
        language: Language code (e.g. 'en-US')
        platform_tag: Canonical platform tag ('linux64', 'win', ...)
        source_base_uri: Base URI of the download service
        checksum: Expected SHA256 of the artifact, if known
        splay_seconds: Seconds a downloaded artifact is reused before re-fetching
        install_path: Directory the build is installed into
        links: Paths to link to the installed executable, in order
        windows_ini_source: Template name for the Windows installer INI
        windows_ini_content: Variables for the INI template
        windows_ini_scope: Where the INI template is looked up
    """

    version: str
    language: str
    platform_tag: str
    source_base_uri: str
    install_path: str
    checksum: Optional[str] = None
    splay_seconds: int = 0
    links: Tuple[str, ...] = ()
    windows_ini_source: str = DEFAULT_INI_SOURCE
    windows_ini_content: Dict[str, Any] = field(default_factory=dict)
    windows_ini_scope: str = DEFAULT_INI_SCOPE

    def __post_init__(self):
        """Validate fields after initialization."""
        if not self.version:
            raise ValueError("Package version cannot be empty")
        if not self.language:
            raise ValueError("Package language cannot be empty")
        if isinstance(self.splay_seconds, bool) or not isinstance(
            self.splay_seconds, int
        ):
            raise TypeError(f"splay_seconds must be int, got {type(self.splay_seconds)}")
        if self.splay_seconds < 0:
            raise ValueError(f"splay_seconds must be >= 0, got {self.splay_seconds}")

    @property
    def key(self) -> Tuple[str, str]:
        """The (version, language) key the install is recorded under."""
        return (self.version, self.language)

    @classmethod
    def create(
        cls,
        version: str,
        platform: ResolvedPlatform,
        language: str = DEFAULT_LANGUAGE,
        uri: str = DEFAULT_URI,
        checksum: Optional[str] = None,
        splay: int = 0,
        path: Optional[str] = None,
        install_root: Optional[str] = None,
        link: Union[str, Iterable[str], None] = None,
        windows_ini_source: str = DEFAULT_INI_SOURCE,
        windows_ini_content: Optional[Dict[str, Any]] = None,
        windows_ini_scope: str = DEFAULT_INI_SCOPE,
    ) -> "PackageSpec":
        """
        Build a spec, deriving defaults from the platform.

        Args:
            version: Firefox version
            platform: Resolved target platform
            language: Language code
            uri: Base URI of the download service
            checksum: Expected SHA256 of the artifact
            splay: Cache freshness window in seconds
            path: Install path (default: '<install_root>/<version>_<language>')
            install_root: Root for the default install path
            link: A link path or an ordered list of link paths
            windows_ini_source: INI template name
            windows_ini_content: INI variables (default: {'install_path': path})
            windows_ini_scope: INI template lookup scope

        Example:
            >>> spec = PackageSpec.create("38.0", resolve_platform("linux", "x86_64"))
            >>> spec.install_path
            '/opt/firefox/38.0_en-US'
        """
        install_path = path or default_install_path(
            version, language, windows=platform.is_windows, install_root=install_root
        )

        if windows_ini_content is None:
            windows_ini_content = {"install_path": install_path}

        return cls(
            version=version,
            language=language,
            platform_tag=platform.canonical_tag,
            source_base_uri=uri.rstrip("/"),
            install_path=install_path,
            checksum=checksum,
            splay_seconds=splay,
            links=normalize_links(link),
            windows_ini_source=windows_ini_source,
            windows_ini_content=dict(windows_ini_content),
            windows_ini_scope=windows_ini_scope,
        )


def normalize_links(link: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """
    Normalize a link attribute to an ordered tuple of paths.

    Example:
        >>> normalize_links("/usr/bin/firefox")
        ('/usr/bin/firefox',)
        >>> normalize_links(None)
        ()
    """
    if link is None:
        return ()
    if isinstance(link, str):
        return (link,)
    links = tuple(link)
    for item in links:
        if not isinstance(item, str):
            raise TypeError(f"Link paths must be strings, got {type(item)}")
    return links


__all__ = [
    "Action",
    "PackageSpec",
    "normalize_links",
    "DEFAULT_URI",
    "DEFAULT_LANGUAGE",
    "DEFAULT_INI_SOURCE",
    "DEFAULT_INI_SCOPE",
]
