# phm/services/storage.py
import os
import secrets
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from phm.core.logging_config import logger
from phm.core.settings import settings

# Subfolders created under the upload root
MEDIA_DIRS = ("photos", "documents", "thumbnails")


def unique_file_name(original_name: str) -> str:
    """'boiler.JPG' -> '1718022000123-3f9a0c1d2b4e5f60.jpg'"""
    ext = Path(original_name or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"


# =========================
# Abstract storage
# =========================
class Storage(ABC):
    """Where uploaded media bytes live. Paths are relative to the backend root."""

    @abstractmethod
    def save(self, subdir: str, original_name: str, data: bytes) -> str:
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        pass


# =========================
# Local storage
# =========================
class LocalStorage(Storage):
    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        for d in MEDIA_DIRS:
            (self.base_path / d).mkdir(parents=True, exist_ok=True)

    def _full_path(self, path: str) -> Path:
        full = (self.base_path / path).resolve()
        # stored paths come from the database; still refuse anything outside the root
        if self.base_path != full and self.base_path not in full.parents:
            raise ValueError(f"Path escapes storage root: {path}")
        return full

    def save(self, subdir: str, original_name: str, data: bytes) -> str:
        rel = f"{subdir}/{unique_file_name(original_name)}"
        file_path = self._full_path(rel)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(data)
        logger.info("file_saved", path=rel, size=len(data))
        return rel

    def read(self, path: str) -> bytes:
        with open(self._full_path(path), "rb") as f:
            return f.read()

    def exists(self, path: str) -> bool:
        try:
            return self._full_path(path).is_file()
        except ValueError:
            return False

    def delete(self, path: str) -> bool:
        try:
            p = self._full_path(path)
            if p.exists():
                p.unlink()
                logger.info("file_deleted", path=path)
                return True
            return False
        except (OSError, ValueError) as e:
            logger.error("file_delete_failed", path=path, error=str(e))
            return False


@lru_cache
def get_storage() -> Storage:
    return LocalStorage(os.path.abspath(settings.UPLOAD_DIR))
