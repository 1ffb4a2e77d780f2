"""
Network download manager with retry logic and checksum verification.

This module provides the default artifact fetcher:
- HTTP/HTTPS downloads with TLS verification and redirect following
- Progress reporting (bytes, percentage, speed, ETA)
- Retry logic with exponential backoff
- SHA256 checksum verification during download
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from firefoxkit.core.exceptions import ChecksumMismatch, TransferError
from firefoxkit.core.interfaces import Fetcher

logger = logging.getLogger(__name__)


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic and checksum verification.

    An existing file at the destination is replaced only once the new
    download is complete and verified.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_sha256: Expected SHA256 hash (verified during download)
        progress_callback: Optional callback for progress updates
        timeout: Socket timeout in seconds
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        TransferError: If download fails after retries
        ChecksumMismatch: If checksum doesn't match expected value
        ValueError: If URL or destination is invalid

    Example:
        >>> url = "https://download.mozilla.org/?product=38.0&os=linux64&lang=en-US"
        >>> download_file(url, Path("cache/38.0.tar.bz2"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    # Ensure destination directory exists
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download_with_progress(
                url=url,
                destination=destination,
                expected_sha256=expected_sha256,
                progress_callback=progress_callback,
                timeout=timeout,
            )
        except RequestException as e:
            if attempt == max_retries - 1:
                raise TransferError(
                    f"Download of {url} failed after {max_retries} attempts: {e}"
                ) from e

            # Exponential backoff
            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise TransferError(f"Download of {url} failed: no attempts made")


def _partial_path(destination: Path) -> Path:
    """Temporary file a download streams into before it is complete."""
    return destination.with_name(f".{destination.name}.part")


def _download_with_progress(
    url: str,
    destination: Path,
    expected_sha256: Optional[str],
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> Path:
    """
    Perform download with streaming and progress updates.

    The body is written to a '.part' file beside the destination and moved
    into place only once it is complete and verified. A failed or
    interrupted download leaves the destination untouched.

    Raises:
        ChecksumMismatch: If checksum doesn't match
        RequestException: If HTTP request fails
    """
    logger.info(f"Downloading from {url}")

    response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    hasher = hashlib.sha256() if expected_sha256 else None

    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    partial = _partial_path(destination)

    try:
        with open(partial, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                if hasher:
                    hasher.update(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = downloaded / elapsed if elapsed > 0 else 0
                    remaining = total_size - downloaded if total_size > 0 else 0
                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=speed,
                            eta_seconds=remaining / speed if speed > 0 else 0,
                        )
                    )
                    last_progress_time = current_time

        if hasher:
            actual_hash = hasher.hexdigest()
            if actual_hash.lower() != expected_sha256.lower():
                raise ChecksumMismatch(destination, expected_sha256, actual_hash)
            logger.info("Checksum verified successfully")

        partial.replace(destination)
    except BaseException as e:
        logger.error(f"Error during download: {e}")
        partial.unlink(missing_ok=True)
        raise

    logger.info(f"Download complete: {destination}")
    return destination


def verify_checksum(file_path: Path, expected_sha256: str) -> bool:
    """
    Verify file SHA256 checksum.

    Args:
        file_path: Path to file to verify
        expected_sha256: Expected SHA256 hash (hex string)

    Returns:
        True if checksum matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest().lower() == expected_sha256.lower()


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


def log_progress(progress: DownloadProgress) -> None:
    """Progress callback that logs each update at INFO level."""
    logger.info(f"  {format_progress(progress)}")


class HttpFetcher(Fetcher):
    """Fetcher that downloads artifacts over HTTP(S) with requests."""

    def __init__(
        self,
        timeout: int = 30,
        max_retries: int = 3,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self.progress_callback = progress_callback

    def fetch(self, url: str, dest_path: Path, checksum: Optional[str] = None) -> None:
        download_file(
            url,
            Path(dest_path),
            expected_sha256=checksum,
            progress_callback=self.progress_callback,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )


__all__ = [
    "DownloadProgress",
    "HttpFetcher",
    "download_file",
    "verify_checksum",
    "format_progress",
    "log_progress",
]
