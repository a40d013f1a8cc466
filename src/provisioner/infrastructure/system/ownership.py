"""Ownership hand-over to the target operating-system user."""

from __future__ import annotations

import os
import pwd
import shutil
from pathlib import Path

import structlog

from provisioner.domain.ports.services import OwnershipManager


logger = structlog.get_logger(__name__)


class PosixOwnershipManager(OwnershipManager):
    """``chown user:group`` using the target user's primary group.

    A no-op when the process already runs as the target user.
    """

    def __init__(self, target_user: str) -> None:
        self._target_user = target_user
        try:
            entry = pwd.getpwnam(target_user)
        except KeyError:
            raise ValueError(f"Unknown target user: {target_user}") from None
        self._uid = entry.pw_uid
        self._gid = entry.pw_gid

    @property
    def is_noop(self) -> bool:
        return self._uid == os.geteuid()

    def hand_over(self, path: Path, recursive: bool = False) -> None:
        if self.is_noop:
            return
        targets = [path]
        if recursive and path.is_dir():
            targets.extend(path.rglob("*"))
        for target in targets:
            shutil.chown(target, user=self._uid, group=self._gid)
        logger.debug("ownership_handed_over", path=str(path), user=self._target_user)


class NullOwnershipManager(OwnershipManager):
    """Leaves ownership untouched; records what would have been handed over."""

    def __init__(self) -> None:
        self.handed_over: list[Path] = []

    def hand_over(self, path: Path, recursive: bool = False) -> None:
        self.handed_over.append(path)
