"""
Timestamped backups of the content directory.
"""
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from rootbyte.config import get_config
from rootbyte.core.errors import ConfigError, ContentError
from rootbyte.core.index import write_json
from rootbyte.utils.nlp import isoformat, utc_now

# Configure logging
logger = logging.getLogger(__name__)

BACKUP_PREFIX = "content-"
MANIFEST_NAME = "backup-manifest.json"


def count_files(directory: Path) -> int:
    return sum(1 for path in directory.rglob('*') if path.is_file())


class ContentBackup:
    """
    Copies the content directory into ``<backup_dir>/content-<timestamp>``
    and prunes old copies.
    """
    def __init__(self, content_dir: Optional[Path] = None, backup_dir: Optional[Path] = None,
                 keep: Optional[int] = None):
        self.content_dir = Path(content_dir or get_config('paths.content_dir'))
        self.backup_dir = Path(backup_dir or get_config('paths.backup_dir'))
        self.keep = keep if keep is not None else get_config('backup.keep', 10)
        if not isinstance(self.keep, int) or self.keep < 1:
            raise ConfigError(f"backup.keep must be a positive integer, got {self.keep!r}")

    def run(self, now: Optional[datetime] = None) -> Path:
        """
        Create one backup with a manifest and prune old ones.

        Returns:
            Path of the new backup directory

        Raises:
            ContentError: If the content directory does not exist
        """
        if not self.content_dir.is_dir():
            raise ContentError(f"Content directory not found: {self.content_dir}")

        now = now or utc_now()
        stamp = now.strftime('%Y-%m-%dT%H-%M-%S')
        target = self.backup_dir / f"{BACKUP_PREFIX}{stamp}"

        logger.info(f"Backing up: {self.content_dir}")
        shutil.copytree(self.content_dir, target, dirs_exist_ok=True)
        file_count = count_files(target)

        write_json(target / MANIFEST_NAME, {
            "timestamp": isoformat(now),
            "backup_type": "content",
            "files_backed_up": file_count,
            "source_directory": str(self.content_dir),
            "backup_directory": str(target),
            "created_by": "RootByte backup",
        })
        logger.info(f"Backup complete: {target} ({file_count} files)")

        self.prune()
        return target

    def prune(self) -> int:
        """
        Delete all but the newest ``keep`` backups.

        Returns:
            Number of backups removed
        """
        backups = sorted(
            (path for path in self.backup_dir.iterdir()
             if path.is_dir() and path.name.startswith(BACKUP_PREFIX)),
            reverse=True,
        )
        stale = backups[self.keep:]
        if stale:
            logger.info(f"Cleaning up {len(stale)} old backups...")
        for path in stale:
            shutil.rmtree(path)
        return len(stale)
