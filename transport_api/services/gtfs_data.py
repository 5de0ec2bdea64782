"""
GTFS upstream data retrieval.

Fetches the raw realtime protobuf payload and members of the static zip
archive from the configured provider. No caching happens here; see
``cached_gtfs.CachedGtfsDataService``.
"""

from __future__ import annotations

import io
import logging
import time
import zipfile

import httpx

from transport_api.core.config import Settings, get_settings
from transport_api.core.metrics import observe_upstream_request
from transport_api.core.telemetry import get_tracer
from transport_api.models.gtfs import GtfsStaticFile
from transport_api.services.gtfs_errors import UpstreamFetchError

logger = logging.getLogger(__name__)


def extract_static_lines(archive: bytes, static_file: GtfsStaticFile) -> list[str]:
    """Read one member of a GTFS zip, dropping the header and blank lines.

    Returns an empty list when the member is missing from the archive.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as bundle:
            try:
                member = bundle.open(static_file.file_name)
            except KeyError:
                logger.error(
                    "File %s not found in GTFS static data", static_file.file_name
                )
                return []

            with io.TextIOWrapper(member, encoding="utf-8-sig") as reader:
                next(reader, None)  # header
                return [line.rstrip("\r\n") for line in reader if line.strip()]
    except (zipfile.BadZipFile, UnicodeDecodeError) as exc:
        raise UpstreamFetchError(
            f"GTFS static archive is unreadable ({static_file.file_name})"
        ) from exc


class GtfsDataService:
    """Raw HTTP access to the GTFS provider."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.gtfs_base_url,
            timeout=self.settings.gtfs_request_timeout_seconds,
            headers={"User-Agent": self.settings.gtfs_user_agent},
            follow_redirects=True,
        )

    async def __aenter__(self) -> "GtfsDataService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def get_realtime_data(self) -> bytes:
        """Fetch the realtime FeedMessage as raw protobuf bytes."""
        logger.debug("Fetching realtime GTFS data")
        content = await self._fetch("realtime", self.settings.gtfs_realtime_endpoint)
        logger.debug("Fetched %s bytes of realtime GTFS data", len(content))
        return content

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]:
        """Fetch the static archive and return the data lines of one member."""
        archive = await self._fetch("static", self.settings.gtfs_static_endpoint)
        lines = extract_static_lines(archive, static_file)
        logger.info(
            "Read %s lines from %s", len(lines), static_file.file_name
        )
        return lines

    async def _fetch(self, endpoint: str, path: str) -> bytes:
        start = time.perf_counter()
        with get_tracer().start_as_current_span(
            "gtfs.upstream.fetch", attributes={"gtfs.endpoint": endpoint}
        ):
            try:
                response = await self.client.get(path)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                observe_upstream_request(endpoint, "error", time.perf_counter() - start)
                logger.error(
                    "GTFS %s request returned HTTP %s",
                    endpoint,
                    exc.response.status_code,
                )
                raise UpstreamFetchError(
                    f"GTFS {endpoint} feed returned HTTP {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                observe_upstream_request(endpoint, "error", time.perf_counter() - start)
                logger.error("GTFS %s request failed: %s", endpoint, exc)
                raise UpstreamFetchError(f"GTFS {endpoint} feed is unreachable") from exc

        observe_upstream_request(endpoint, "success", time.perf_counter() - start)
        return response.content


__all__ = ["GtfsDataService", "extract_static_lines"]
