"""
Local file storage for room photos and payment QR codes.
"""
import base64
import binascii
import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Union

from roomrent.config import config
from roomrent.errors import ValidationError

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "webp"}

_DATA_URL_RE = re.compile(r"^data:image/(\w+);base64,")


class LocalFileStorage:
    def __init__(self, upload_dir: Union[str, Path] = config.UPLOAD_DIR, url_prefix: str = config.UPLOAD_URL_PREFIX):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _decode(self, data: Union[bytes, str]) -> tuple[bytes, str]:
        if isinstance(data, bytes):
            return data, "jpg"

        match = _DATA_URL_RE.match(data)
        extension = match.group(1).lower() if match else "jpg"
        payload = _DATA_URL_RE.sub("", data)
        try:
            return base64.b64decode(payload, validate=True), extension
        except (binascii.Error, ValueError):
            raise ValidationError("Invalid base64 image data")

    def store(self, data: Union[bytes, str], folder: str = "rooms") -> str:
        """Save an image (raw bytes or base64 / data URL) and return its URL"""
        content, extension = self._decode(data)

        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError("Invalid image format. Only JPEG, PNG, and WebP are allowed.")
        if len(content) > MAX_FILE_SIZE:
            raise ValidationError("File size exceeds 5MB limit")

        folder_path = self.upload_dir / folder
        folder_path.mkdir(parents=True, exist_ok=True)

        filename = f"{uuid.uuid4()}.{extension}"
        (folder_path / filename).write_bytes(content)
        logging.info(f"Stored {len(content)} bytes as {folder}/{filename}")

        return f"{self.url_prefix}/{folder}/{filename}"

    def _path_for(self, url: str) -> Optional[Path]:
        if not url.startswith(self.url_prefix + "/"):
            return None
        relative = url[len(self.url_prefix) + 1:]
        path = (self.upload_dir / relative).resolve()
        if self.upload_dir.resolve() not in path.parents:
            return None
        return path

    def delete(self, url: Optional[str]) -> None:
        """Remove a stored file; unknown or foreign URLs are ignored"""
        if not url:
            return
        path = self._path_for(url)
        if path is None:
            logging.warning(f"Refusing to delete file outside upload dir: {url}")
            return
        try:
            path.unlink()
            logging.info(f"Deleted file {url}")
        except FileNotFoundError:
            logging.info(f"File already gone: {url}")


file_storage: Optional[LocalFileStorage] = None


def get_file_storage() -> LocalFileStorage:
    global file_storage
    if file_storage is None:
        file_storage = LocalFileStorage()
    return file_storage
