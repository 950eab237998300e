from functools import lru_cache
from typing import Optional

from fastapi import UploadFile

from assessor.config import ConfigStore, get_settings


@lru_cache
def get_config_store() -> ConfigStore:
    return ConfigStore(get_settings())


def get_chat_client():
    """Client override hook; ``None`` lets the orchestrator build one from the config."""
    return None


class UploadedCodeFile:
    """Adapts a multipart upload to the scanner's uploaded-file interface."""

    def __init__(self, upload: UploadFile, relative_path: Optional[str] = None):
        self._upload = upload
        self.relative_path = relative_path or upload.filename or ""

    async def size(self) -> int:
        if self._upload.size is not None:
            return self._upload.size
        data = await self._upload.read()
        await self._upload.seek(0)
        return len(data)

    async def read_text(self) -> str:
        data = await self._upload.read()
        return data.decode("utf-8", errors="replace")
