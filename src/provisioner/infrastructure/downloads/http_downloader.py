"""Streaming HTTP downloader for release archives."""

from __future__ import annotations

from pathlib import Path

import requests
import structlog

from provisioner.domain.exceptions import DownloadError
from provisioner.domain.ports.services import ArtifactDownloader


logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


class HttpArtifactDownloader(ArtifactDownloader):
    """Downloads with ``requests``; a partial file is removed on failure."""

    def __init__(self, timeout: float = 300.0, session: requests.Session | None = None) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def download(self, url: str, destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        try:
            with self._session.get(url, stream=True, timeout=self._timeout) as response:
                response.raise_for_status()
                with open(destination, "wb") as handle:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
                            written += len(chunk)
        except (requests.RequestException, OSError) as exc:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"{url}: {exc}") from exc

        if written == 0:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"{url}: empty response body")

        logger.info("archive_downloaded", url=url, bytes=written)
        return destination
