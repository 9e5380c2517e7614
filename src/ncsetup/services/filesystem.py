"""Filesystem operations on the target host."""

import os
import shutil
from pathlib import Path


class HostFileSystem:
    """Directory, ownership and permission changes."""

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def chown_recursive(self, path: Path, user: str, group: str) -> None:
        shutil.chown(path, user=user, group=group)
        for root, dirs, files in os.walk(path):
            for name in dirs + files:
                shutil.chown(os.path.join(root, name), user=user, group=group)

    def chmod_recursive(self, path: Path, mode: int) -> None:
        """Apply mode to every directory and file under path (like chmod -R)."""
        os.chmod(path, mode)
        for root, dirs, files in os.walk(path):
            for name in dirs + files:
                os.chmod(os.path.join(root, name), mode)

    def read_text(self, path: Path) -> str:
        return path.read_text()

    def touch(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
