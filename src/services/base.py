"""Shared plumbing for services that run against the vault collaborators."""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from services.errors import (
    NotAFileError,
    NotFoundError,
    OperationFailedError,
    VaultError,
)
from services.paths import normalize_path
from services.ports import FileHandle, FileStat, FolderHandle, VaultContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VaultService:
    def __init__(self, ctx: VaultContext):
        self.ctx = ctx
        self.store = ctx.store
        self.metadata = ctx.metadata
        self.files = ctx.files

    async def _call(self, operation: str, path: str, awaitable: Awaitable[T]) -> T:
        """Await a collaborator call, wrapping host failures in OperationFailedError."""
        try:
            return await awaitable
        except VaultError:
            raise
        except Exception as e:
            logger.warning("Failed to %s %s: %s", operation, path, e)
            raise OperationFailedError(operation, path, str(e)) from e

    def _get_file(self, path: str) -> FileHandle:
        normalized = normalize_path(path)
        handle = self.store.get_by_path(normalized)
        if handle is None:
            raise NotFoundError(normalized)
        if isinstance(handle, FolderHandle):
            raise NotAFileError(normalized)
        return handle

    def _stat(self, file: FileHandle) -> FileStat:
        stat = self.store.stat(file.path)
        if stat is None:
            raise NotFoundError(file.path)
        return stat

    async def _read(self, file: FileHandle) -> str:
        return await self._call("read", file.path, self.store.read(file))
