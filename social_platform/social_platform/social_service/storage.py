"""
Local file store for post attachments.

Uploads are written under a random name and served back by the
``StaticFiles`` mount that ``create_app`` attaches at ``url_path``.
"""
import logging
import os
import shutil
import uuid
from typing import Optional

from fastapi import UploadFile

from .errors import StoreError

logger = logging.getLogger(__name__)


class UploadStorage:
    def __init__(self, directory: str, url_path: str = "/uploads"):
        self.directory = directory
        self.url_path = "/" + url_path.strip("/")

    def ensure_directory(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    @staticmethod
    def _extension(filename: Optional[str]) -> str:
        if not filename or "." not in filename:
            return ""
        ext = filename.rsplit(".", 1)[-1].lower()
        return f".{ext}" if ext.isalnum() else ""

    def save(self, upload: UploadFile) -> str:
        """
        Persist ``upload`` under a unique name and return its public path.

        Raises:
            StoreError: If the file cannot be written; no partial file is kept
        """
        name = f"{uuid.uuid4().hex}{self._extension(upload.filename)}"
        file_path = os.path.join(self.directory, name)

        try:
            self.ensure_directory()
            with open(file_path, "wb") as f:
                shutil.copyfileobj(upload.file, f)
        except OSError as e:
            if os.path.isfile(file_path):
                os.remove(file_path)
            logger.error("Failed to store upload %s: %s", upload.filename, e)
            raise StoreError(f"Failed to store attachment: {e}") from e

        logger.info("Stored upload %s as %s", upload.filename, name)
        return f"{self.url_path}/{name}"

    def delete(self, url: Optional[str]) -> None:
        if not url or not url.startswith(self.url_path + "/"):
            return
        name = os.path.basename(url)
        file_path = os.path.join(self.directory, name)
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.info("Removed upload %s", name)
