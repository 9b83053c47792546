"""Per-user object storage on the local filesystem."""

import asyncio
import shutil
from pathlib import Path
from uuid import UUID

import structlog

from saaskit.core.core import Service

logger = structlog.get_logger(__name__)

USERS_DIR = "users"


def get_user_objects_path(storage_path: str, user_id: UUID) -> Path:
    """Directory holding every object owned by the user."""
    return Path(storage_path) / USERS_DIR / str(user_id)


def list_objects(root: Path) -> list[str]:
    """Object keys (paths relative to root) of all files below root."""
    if not root.exists():
        return []
    return sorted(str(path.relative_to(root)) for path in root.rglob("*") if path.is_file())


class StorageService(Service):
    """Stores user files under `{storage_path}/users/{user_id}/`."""

    def list_user_objects(self, user_id: UUID) -> list[str]:
        return list_objects(get_user_objects_path(self.core.config.storage_path, user_id))

    async def delete_user_objects(self, user_id: UUID) -> int:
        """Delete every object owned by the user. Returns the number of files removed."""
        root = get_user_objects_path(self.core.config.storage_path, user_id)
        keys = list_objects(root)
        if not keys:
            logger.debug("no_user_objects", user_id=user_id)
            return 0

        await asyncio.to_thread(shutil.rmtree, root)
        logger.info("user_objects_deleted", user_id=user_id, count=len(keys))
        return len(keys)
