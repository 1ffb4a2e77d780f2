"""
Centralized exception hierarchy for FirefoxKit.

Fatal errors abort the current action. ``NothingToRemove`` is the only
error the action dispatcher reports without failing.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class FirefoxKitError(Exception):
    """Base exception for all FirefoxKit errors."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class MalformedVersion(FirefoxKitError):
    """Raised when a target version string has no dotted numeric part."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Malformed version string: {text!r}")


# ============================================================================
# Fetch Exceptions
# ============================================================================


class FetchError(FirefoxKitError):
    """Base exception for artifact fetch failures."""

    pass


class TransferError(FetchError):
    """Raised when an artifact cannot be transferred."""

    pass


class ChecksumMismatch(FetchError):
    """Raised when a fetched artifact does not match its expected checksum."""

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )


# ============================================================================
# Install Exceptions
# ============================================================================


class ExtractionFailure(FirefoxKitError):
    """Raised when an archive cannot be extracted."""

    pass


class InstallerInvocationFailure(FirefoxKitError):
    """Raised when the Windows installer exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        msg = f"Installer command failed with exit code {returncode}: {command}"
        if output:
            msg += f"\n{output.strip()}"
        super().__init__(msg)


class DependencyInstallError(FirefoxKitError):
    """Raised when required system libraries cannot be installed."""

    pass


class TemplateRenderError(FirefoxKitError):
    """Raised when the Windows installer INI cannot be rendered."""

    pass


class LinkError(FirefoxKitError):
    """Raised when a link to the installed executable cannot be created."""

    pass


class NothingToRemove(FirefoxKitError):
    """Raised when a remove action has no recorded install to remove."""

    def __init__(self, version: str, language: str):
        self.version = version
        self.language = language
        super().__init__(f"No recorded install of {version} ({language}) to remove")
