"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import hashlib
import logging
from unittest.mock import Mock, patch

import pytest
import responses
from requests.exceptions import ChunkedEncodingError

from firefoxkit.core.download import (
    DownloadProgress,
    HttpFetcher,
    download_file,
    format_progress,
    log_progress,
    verify_checksum,
)
from firefoxkit.core.exceptions import ChecksumMismatch, FetchError, TransferError

URL = "https://download.mozilla.org/?product=38.0&os=linux64&lang=en-US"


def _interrupted_response(sent: bytes = b"x" * 100):
    """Streaming response that breaks after sending some bytes."""

    def iter_content(chunk_size=8192):
        yield sent
        raise ChunkedEncodingError("Connection broken: IncompleteRead")

    response = Mock()
    response.headers = {"content-length": "1000"}
    response.iter_content.side_effect = iter_content
    return response


class TestFormatProgress:
    """Test format_progress function."""

    def test_format_with_known_size(self):
        """Test formatting progress with known total size."""
        progress = DownloadProgress(
            bytes_downloaded=10485760,  # 10 MB
            total_bytes=104857600,  # 100 MB
            percentage=10.0,
            speed_bps=2097152,  # 2 MB/s
            eta_seconds=45,
        )

        result = format_progress(progress)

        assert "10.0/100.0 MB" in result
        assert "(10.0%)" in result
        assert "2.0 MB/s" in result
        assert "ETA: 45s" in result

    def test_format_with_unknown_size(self):
        """Test formatting progress with unknown total size."""
        progress = DownloadProgress(
            bytes_downloaded=10485760,
            total_bytes=0,
            percentage=0.0,
            speed_bps=1048576,
            eta_seconds=0,
        )

        result = str(progress)

        assert "10.0 MB" in result
        assert "ETA" not in result

    def test_log_progress(self, caplog):
        """Test the logging callback reports formatted progress at INFO."""
        progress = DownloadProgress(
            bytes_downloaded=52428800,
            total_bytes=104857600,
            percentage=50.0,
            speed_bps=1048576,
            eta_seconds=50,
        )

        with caplog.at_level(logging.INFO, logger="firefoxkit.core.download"):
            log_progress(progress)

        assert "50.0/100.0 MB (50.0%)" in caplog.text


class TestVerifyChecksum:
    """Test verify_checksum function."""

    def test_matching_checksum(self, tmp_path):
        """Test verify returns True for matching checksum."""
        file = tmp_path / "38.0.tar.bz2"
        file.write_bytes(b"firefox")

        assert verify_checksum(file, hashlib.sha256(b"firefox").hexdigest()) is True

    def test_case_insensitive(self, tmp_path):
        """Test verify is case-insensitive."""
        file = tmp_path / "38.0.tar.bz2"
        file.write_bytes(b"firefox")
        expected = hashlib.sha256(b"firefox").hexdigest().upper()

        assert verify_checksum(file, expected) is True

    def test_non_matching_checksum(self, tmp_path):
        """Test verify returns False for non-matching checksum."""
        file = tmp_path / "38.0.tar.bz2"
        file.write_bytes(b"firefox")

        assert verify_checksum(file, "a" * 64) is False

    def test_nonexistent_file(self, tmp_path):
        """Test verify raises FileNotFoundError for nonexistent file."""
        with pytest.raises(FileNotFoundError):
            verify_checksum(tmp_path / "missing", "a" * 64)


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_simple_download(self, tmp_path):
        """Test simple download without checksum."""
        content = b"tarball bytes"
        destination = tmp_path / "cache" / "38.0.tar.bz2"
        responses.add(responses.GET, URL, body=content, status=200)

        result = download_file(URL, destination)

        assert result == destination
        assert destination.read_bytes() == content

    @responses.activate
    def test_follows_redirects(self, tmp_path):
        """Test the download service redirect is followed."""
        mirror = "https://mirror.example.com/firefox-38.0.tar.bz2"
        destination = tmp_path / "38.0.tar.bz2"
        responses.add(
            responses.GET, URL, status=302, headers={"Location": mirror}
        )
        responses.add(responses.GET, mirror, body=b"from mirror", status=200)

        download_file(URL, destination)

        assert destination.read_bytes() == b"from mirror"

    @responses.activate
    def test_overwrites_existing_file(self, tmp_path):
        """Test an existing cache file is replaced."""
        destination = tmp_path / "38.0.tar.bz2"
        destination.write_bytes(b"stale")
        responses.add(responses.GET, URL, body=b"fresh", status=200)

        download_file(URL, destination)

        assert destination.read_bytes() == b"fresh"

    @responses.activate
    def test_download_with_checksum_verification(self, tmp_path):
        """Test download with checksum verification."""
        content = b"tarball bytes"
        destination = tmp_path / "38.0.tar.bz2"
        responses.add(responses.GET, URL, body=content, status=200)

        download_file(
            URL, destination, expected_sha256=hashlib.sha256(content).hexdigest()
        )

        assert destination.read_bytes() == content

    @responses.activate
    def test_download_with_wrong_checksum(self, tmp_path):
        """Test download fails with wrong checksum and removes the file."""
        destination = tmp_path / "38.0.tar.bz2"
        responses.add(responses.GET, URL, body=b"tampered", status=200)

        with pytest.raises(ChecksumMismatch, match="Checksum mismatch"):
            download_file(URL, destination, expected_sha256="a" * 64)

        assert not destination.exists()
        assert not (tmp_path / ".38.0.tar.bz2.part").exists()
        # Checksum failures are not retried
        assert len(responses.calls) == 1

    @patch("firefoxkit.core.download.requests.get")
    def test_interrupted_download_leaves_no_file(self, mock_get, tmp_path):
        """Test a stream broken mid-download leaves nothing at the destination."""
        mock_get.return_value = _interrupted_response()
        destination = tmp_path / "38.0.tar.bz2"

        with pytest.raises(TransferError):
            download_file(URL, destination, max_retries=1)

        assert not destination.exists()
        assert list(tmp_path.iterdir()) == []

    @patch("firefoxkit.core.download.time.sleep")
    @patch("firefoxkit.core.download.requests.get")
    def test_interrupted_download_keeps_previous_file(
        self, mock_get, mock_sleep, tmp_path
    ):
        """Test a failed download does not clobber an earlier complete file."""
        mock_get.side_effect = lambda *args, **kwargs: _interrupted_response()
        destination = tmp_path / "38.0.tar.bz2"
        destination.write_bytes(b"previous download")

        with pytest.raises(TransferError):
            download_file(URL, destination, max_retries=2)

        assert destination.read_bytes() == b"previous download"
        assert not (tmp_path / ".38.0.tar.bz2.part").exists()
        assert mock_get.call_count == 2

    @responses.activate
    @patch("firefoxkit.core.download.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep, tmp_path):
        """Test transient failures are retried with backoff."""
        destination = tmp_path / "38.0.tar.bz2"
        responses.add(responses.GET, URL, status=503)
        responses.add(responses.GET, URL, body=b"ok", status=200)

        download_file(URL, destination)

        assert destination.read_bytes() == b"ok"
        mock_sleep.assert_called_once_with(1)

    @responses.activate
    @patch("firefoxkit.core.download.time.sleep")
    def test_raises_transfer_error_after_retries(self, mock_sleep, tmp_path):
        """Test persistent failures raise TransferError."""
        destination = tmp_path / "38.0.tar.bz2"
        responses.add(responses.GET, URL, status=404)

        with pytest.raises(TransferError, match="after 3 attempts"):
            download_file(URL, destination, max_retries=3)

        assert len(responses.calls) == 3
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1, 2]

    def test_empty_url(self, tmp_path):
        """Test empty URL is rejected."""
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "file")

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test download reports progress."""
        content = b"x" * 100000
        responses.add(
            responses.GET,
            URL,
            body=content,
            status=200,
            headers={"content-length": str(len(content))},
        )
        updates = []

        download_file(URL, tmp_path / "file", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(content)


class TestHttpFetcher:
    """Test HttpFetcher."""

    @responses.activate
    def test_fetch(self, tmp_path):
        """Test fetch downloads to the destination."""
        responses.add(responses.GET, URL, body=b"tarball", status=200)
        destination = tmp_path / "38.0.tar.bz2"

        HttpFetcher().fetch(URL, destination)

        assert destination.read_bytes() == b"tarball"

    @responses.activate
    def test_fetch_checksum_mismatch(self, tmp_path):
        """Test fetch surfaces checksum mismatches as fetch errors."""
        responses.add(responses.GET, URL, body=b"tarball", status=200)

        with pytest.raises(FetchError):
            HttpFetcher().fetch(URL, tmp_path / "38.0.tar.bz2", checksum="0" * 64)

    @responses.activate
    @patch("firefoxkit.core.download.time.sleep")
    def test_fetch_uses_retry_setting(self, mock_sleep, tmp_path):
        """Test max_retries is passed through."""
        responses.add(responses.GET, URL, status=500)

        with pytest.raises(TransferError):
            HttpFetcher(max_retries=1).fetch(URL, tmp_path / "38.0.tar.bz2")

        assert len(responses.calls) == 1
        mock_sleep.assert_not_called()
