"""
Network download of launcher archives.

Downloads a release asset or CI artifact archive to a local file:
- Authenticated HTTP/HTTPS GET (bearer token from configuration)
- Streaming to disk, overwriting any existing file
- Optional progress reporting (bytes, percentage, speed, ETA)

No retry or checksum verification is done; the first failure is
reported to the caller.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from opendex_launcher.core.exceptions import FilesystemError, TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


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


def auth_headers(token: Optional[str]) -> dict:
    """Authorization header for the configured access token, if any."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def download_file(
    url: str,
    destination: Path,
    token: Optional[str] = None,
    session: Optional[requests.Session] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Download file from URL to destination.

    Args:
        url: URL to download from
        destination: Local path to save file (overwritten if it exists)
        token: Access token sent as a bearer Authorization header
        session: requests session to use (a new one is created if None)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds (None blocks indefinitely)

    Returns:
        Path to downloaded file

    Raises:
        TransferError: If the request fails or the server answers non-2xx.
            For HTTP errors the response body becomes the error message.
        ValueError: If URL or destination is invalid

    Example:
        >>> download_file(
        ...     "https://github.com/org/repo/releases/download/21.02.02/launcher-linux-amd64.zip",
        ...     Path("versions/21.02.02/launcher.zip"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    http = session or requests.Session()

    logger.info(f"Downloading from {url}")

    try:
        with http.get(
            url,
            headers=auth_headers(token),
            stream=True,
            timeout=timeout,
            allow_redirects=True,
        ) as response:
            if not response.ok:
                raise TransferError(response.text, status_code=response.status_code)
            _stream_to_file(response, destination, progress_callback)
    except RequestException as e:
        raise TransferError(f"request {url}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"write {destination}: {e}") from e

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    response: requests.Response,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
) -> None:
    """
    Write a streamed response body to destination.

    This is an internal function called by download_file().
    """
    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            # Report progress (max once per 0.5 seconds to avoid spam)
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                elapsed = current_time - start_time
                speed = downloaded / elapsed if elapsed > 0 else 0
                remaining = total_size - downloaded if total_size > 0 else 0
                eta = remaining / speed if speed > 0 else 0

                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=speed,
                        eta_seconds=eta,
                    )
                )
                last_progress_time = current_time


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
