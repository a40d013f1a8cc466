"""Tool Acquirer."""

from __future__ import annotations

import os
import shutil
import tarfile
import tempfile
from pathlib import Path

import structlog

from provisioner.domain.exceptions import CommandError, DownloadError, ToolAcquisitionError
from provisioner.domain.models.artifacts import default_archives, ToolArchive, ToolSet
from provisioner.domain.ports.services import ArtifactDownloader, CommandRunner


logger = structlog.get_logger(__name__)

EXECUTABLE_MODE = 0o755

# binary -> version-report arguments
VERSION_COMMANDS: dict[str, list[str]] = {
    "openshift-install": ["version"],
    "oc": ["version", "--client"],
}


class ToolAcquirer:
    """Download, extract and install the pinned installer and client binaries.

    Transient archives and extraction output live in a scratch directory
    that is removed whether or not installation succeeded, so a rerun
    never picks up a stale version. There is no fallback mirror.
    """

    def __init__(
        self,
        downloader: ArtifactDownloader,
        runner: CommandRunner,
        version: str,
        mirror_url: str,
        bin_dir: Path,
        scratch_root: Path | None = None,
        archives: tuple[ToolArchive, ...] | None = None,
    ) -> None:
        self._downloader = downloader
        self._runner = runner
        self._version = version
        self._mirror_url = mirror_url
        self._bin_dir = bin_dir
        self._scratch_root = scratch_root
        self._archives = archives or default_archives(version)

    def acquire(self) -> ToolSet:
        logger.info("tools_download_started", version=self._version, bin_dir=str(self._bin_dir))
        if self._scratch_root is not None:
            self._scratch_root.mkdir(parents=True, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix="ocp-tools-", dir=self._scratch_root))

        installed: dict[str, Path] = {}
        try:
            for archive in self._archives:
                archive_path = self._download(archive, scratch)
                extracted = self._extract(archive, archive_path, scratch)
                installed.update(self._install(extracted))
        finally:
            self._cleanup(scratch)

        reports = self._verify(installed)
        installer = installed.get("openshift-install")
        if installer is None:
            raise ToolAcquisitionError("No archive provided the openshift-install binary")

        logger.info("tools_installation_successful", version=self._version, tools=sorted(installed))
        return ToolSet(
            version=self._version,
            installer=installer,
            binaries=installed,
            version_reports=reports,
        )

    def _download(self, archive: ToolArchive, scratch: Path) -> Path:
        url = archive.url(self._mirror_url, self._version)
        logger.info("downloading_archive", url=url)
        try:
            return self._downloader.download(url, scratch / archive.archive_name)
        except DownloadError as exc:
            raise ToolAcquisitionError(f"Download of {url} failed: {exc}") from exc

    @staticmethod
    def _extract(archive: ToolArchive, archive_path: Path, scratch: Path) -> dict[str, Path]:
        """Extract only the named binaries; archive extras (README) are skipped."""
        target = scratch / "extract"
        target.mkdir(exist_ok=True)
        found: dict[str, Path] = {}
        try:
            with tarfile.open(archive_path, "r:*") as tar:
                for member in tar.getmembers():
                    name = os.path.basename(member.name)
                    if not member.isfile() or name not in archive.binaries or name in found:
                        continue
                    source = tar.extractfile(member)
                    if source is None:
                        continue
                    destination = target / name
                    with source, open(destination, "wb") as out:
                        shutil.copyfileobj(source, out)
                    found[name] = destination
        except (tarfile.TarError, OSError) as exc:
            raise ToolAcquisitionError(f"Extraction of {archive.archive_name} failed: {exc}") from exc

        missing = sorted(set(archive.binaries) - set(found))
        if missing:
            raise ToolAcquisitionError(
                f"{archive.archive_name} does not contain: {', '.join(missing)}"
            )
        logger.info("archive_extracted", archive=archive.archive_name, binaries=sorted(found))
        return found

    def _install(self, extracted: dict[str, Path]) -> dict[str, Path]:
        installed: dict[str, Path] = {}
        try:
            self._bin_dir.mkdir(parents=True, exist_ok=True)
            for name, source in extracted.items():
                destination = self._bin_dir / name
                shutil.move(str(source), str(destination))
                os.chmod(destination, EXECUTABLE_MODE)
                installed[name] = destination
        except OSError as exc:
            raise ToolAcquisitionError(f"Installing into {self._bin_dir} failed: {exc}") from exc
        return installed

    @staticmethod
    def _cleanup(scratch: Path) -> None:
        try:
            shutil.rmtree(scratch)
        except OSError as exc:
            logger.warning("tools_cleanup_failed", path=str(scratch), error=str(exc))

    def _verify(self, installed: dict[str, Path]) -> dict[str, str]:
        reports: dict[str, str] = {}
        for name, args in VERSION_COMMANDS.items():
            path = installed.get(name)
            if path is None:
                continue
            try:
                result = self._runner.run([str(path), *args])
            except CommandError as exc:
                raise ToolAcquisitionError(f"{name} version check failed: {exc}") from exc
            reports[name] = result.stdout.strip()
            if self._version not in result.stdout:
                logger.warning(
                    "tool_version_mismatch", tool=name, expected=self._version, report=reports[name]
                )
            else:
                logger.info("tool_version_verified", tool=name, report=reports[name])
        return reports
