"""Application release discovery and installation."""

import logging
import os
import re
import tempfile
from pathlib import Path

from ..constants import DOWNLOAD_TIMEOUT
from ..errors import ProvisionError
from .shell import run_command

logger = logging.getLogger(__name__)

ARCHIVE_RE = re.compile(r"nextcloud-(\d+(?:\.\d+)*)\.zip")
ARCHIVE_DIR = "nextcloud"


def parse_version(version: str) -> tuple[int, ...]:
    """Convert a dotted version to a sortable tuple."""
    return tuple(int(part) for part in version.split("."))


def latest_archive(listing: str) -> str | None:
    """Return the archive name with the highest version in a release listing."""
    versions = {match.group(1) for match in ARCHIVE_RE.finditer(listing)}
    if not versions:
        return None
    return f"nextcloud-{max(versions, key=parse_version)}.zip"


class ReleaseSource:
    """Download and unpack release archives with curl and unzip."""

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"

    def resolve_archive(self, version: str | None = None) -> str:
        """Return the archive file name for a pinned version, or the latest."""
        if version:
            return f"nextcloud-{version}.zip"
        listing = run_command(["curl", "-fsSL", self._base_url], timeout=DOWNLOAD_TIMEOUT)
        archive = latest_archive(listing.stdout)
        if archive is None:
            raise ProvisionError(f"No release archives found at {self._base_url}")
        return archive

    def install_archive(self, archive: str, destination: Path) -> None:
        """Download an archive and move its top-level directory to destination.

        Extraction happens in a scratch directory next to the destination and
        finishes with a rename, so an interrupted run never leaves a partial tree.
        """
        if destination.exists():
            raise ProvisionError(f"{destination} exists but is not a complete installation")
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=destination.parent, prefix=".ncsetup-") as scratch:
            zip_path = Path(scratch) / archive
            logger.info("Downloading %s", self._base_url + archive)
            run_command(
                ["curl", "-fsSL", "-o", str(zip_path), self._base_url + archive],
                timeout=DOWNLOAD_TIMEOUT,
            )
            run_command(["unzip", "-q", str(zip_path), "-d", scratch], timeout=DOWNLOAD_TIMEOUT)
            os.replace(Path(scratch) / ARCHIVE_DIR, destination)
