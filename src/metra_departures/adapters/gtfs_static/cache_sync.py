"""Keeps the on-disk GTFS schedule snapshot in sync with the published version."""

import asyncio
import io
import logging
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

from metra_departures.adapters.gtfs_static.csv_tables import REQUIRED_FILES
from metra_departures.domain.errors import (
    DownloadFailedError,
    ExtractionFailedError,
    NoCacheError,
    TransportError,
)
from metra_departures.domain.ports.byte_fetcher import ByteFetcher

logger = logging.getLogger(__name__)

SNAPSHOT_DIRNAME = "gtfs"
VERSION_MARKER = "published.txt"


def is_valid_snapshot(directory: Path) -> bool:
    """Every required table exists and is non-empty."""
    for filename in REQUIRED_FILES:
        path = directory / filename
        if not path.is_file() or path.stat().st_size == 0:
            return False
    return True


def extract_archive(archive: bytes, target: Path) -> None:
    """Unpack ``archive`` into ``target``, flattening member paths.

    Raises:
        ExtractionFailedError: The archive is corrupt, or a required table is
            missing or empty after extraction.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            for member in zf.infolist():
                if member.is_dir():
                    continue
                name = PurePosixPath(member.filename).name
                if not name:
                    continue
                with zf.open(member) as src, open(target / name, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError) as e:
        raise ExtractionFailedError(f"Failed to extract schedule files: {e}") from e

    missing = [
        filename
        for filename in REQUIRED_FILES
        if not (target / filename).is_file() or (target / filename).stat().st_size == 0
    ]
    if missing:
        raise ExtractionFailedError(f"Schedule archive lacks {', '.join(missing)}")


class CacheSync:
    """Downloads the schedule archive when the published version changes.

    The snapshot lives in ``<cache_dir>/gtfs/`` together with the version
    marker it was extracted for. A new snapshot is assembled in a temporary
    sibling directory and promoted by renames, so the previous snapshot stays
    intact until the new one is complete.
    """

    def __init__(
        self,
        fetcher: ByteFetcher,
        cache_dir: str | Path,
        version_url: str,
        archive_url: str,
        timeout: float = 20.0,
    ) -> None:
        self._fetcher = fetcher
        self._cache_dir = Path(cache_dir).expanduser()
        self._version_url = version_url
        self._archive_url = archive_url
        self._timeout = timeout

    @property
    def snapshot_dir(self) -> Path:
        return self._cache_dir / SNAPSHOT_DIRNAME

    def has_valid_snapshot(self) -> bool:
        return is_valid_snapshot(self.snapshot_dir)

    def local_version(self) -> str | None:
        """Version marker of the current snapshot, if one was recorded."""
        marker = self.snapshot_dir / VERSION_MARKER
        try:
            return marker.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None

    def _use_cached(self, why: str) -> Path:
        if not self.has_valid_snapshot():
            logger.error(f"{why} and no cached schedule is available")
            raise NoCacheError()
        logger.warning(f"{why}, using cached schedule version {self.local_version()!r}")
        return self.snapshot_dir

    async def ensure_dataset(self) -> Path:
        """Return the directory of a valid snapshot, downloading a new one if needed.

        Raises:
            NoCacheError: Network unavailable and nothing usable on disk.
            DownloadFailedError: The archive request returned a non-200 status.
            ExtractionFailedError: The downloaded archive was unusable.
        """
        try:
            response = await self._fetcher.fetch(
                self._version_url, timeout_seconds=self._timeout
            )
        except TransportError:
            return self._use_cached("Schedule version check failed")
        if response.status != 200:
            return self._use_cached(f"Schedule version check returned HTTP {response.status}")

        remote_version = response.body.decode("utf-8", errors="replace").strip()
        if self.has_valid_snapshot() and remote_version == self.local_version():
            logger.debug(f"Schedule version {remote_version!r} is current")
            return self.snapshot_dir

        logger.info(f"Downloading schedule version {remote_version!r}")
        try:
            archive = await self._fetcher.fetch(self._archive_url, timeout_seconds=self._timeout)
        except TransportError:
            return self._use_cached("Schedule download failed")
        if archive.status != 200:
            raise DownloadFailedError(archive.status)

        try:
            await asyncio.to_thread(self._install, archive.body, remote_version)
        except OSError as e:
            raise ExtractionFailedError(f"Failed to install schedule files: {e}") from e
        logger.info(f"Installed schedule version {remote_version!r}")
        return self.snapshot_dir

    def _install(self, archive: bytes, version: str) -> None:
        """Extract into a temporary directory and swap it in place of the snapshot.

        Runs in a worker thread. The temporary directory never survives this
        call, whether it succeeds or fails.
        """
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=self._cache_dir, prefix=".gtfs-new-"))
        retired: Path | None = None
        try:
            extract_archive(archive, staging)
            (staging / VERSION_MARKER).write_text(version, encoding="utf-8")

            if self.snapshot_dir.exists():
                retired = Path(tempfile.mkdtemp(dir=self._cache_dir, prefix=".gtfs-old-"))
                retired.rmdir()
                self.snapshot_dir.rename(retired)
            try:
                staging.rename(self.snapshot_dir)
            except OSError:
                if retired is not None:
                    retired.rename(self.snapshot_dir)
                    retired = None
                raise
        finally:
            shutil.rmtree(staging, ignore_errors=True)
            if retired is not None:
                shutil.rmtree(retired, ignore_errors=True)
