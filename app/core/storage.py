# File: app/core/storage.py
import enum
import io
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.uploader

from app.core.config import settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class FileKind(str, enum.Enum):
    CERTIFICATE = "certificate"
    PHOTO = "photo"


ALLOWED_EXTENSIONS = {
    FileKind.CERTIFICATE: {".pdf", ".jpg", ".jpeg", ".png", ".doc", ".docx"},
    FileKind.PHOTO: {".jpg", ".jpeg", ".png"},
}

FOLDERS = {
    FileKind.CERTIFICATE: "certificates",
    FileKind.PHOTO: "photos",
}


def max_size_for(kind: FileKind) -> int:
    return settings.MAX_PHOTO_SIZE if kind == FileKind.PHOTO else settings.MAX_CERTIFICATE_SIZE


def validate_upload(content: bytes, filename: str, kind: FileKind) -> str:
    """Return the normalised extension or raise ValidationError."""
    extension = os.path.splitext(filename or "")[1].lower()
    if extension not in ALLOWED_EXTENSIONS[kind]:
        allowed = ", ".join(sorted(ext.lstrip(".").upper() for ext in ALLOWED_EXTENSIONS[kind]))
        raise ValidationError(f"Only {allowed} files are allowed", errors={"file": "unsupported file type"})
    if not content:
        raise ValidationError("No file uploaded", errors={"file": "empty upload"})
    limit = max_size_for(kind)
    if len(content) > limit:
        raise ValidationError(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB",
            errors={"file": "too large"},
        )
    return extension


class LocalFileStorage:
    """Stores uploads under UPLOAD_DIR; references are paths relative to it (served at /uploads)."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR)

    def store(self, content: bytes, filename: str, kind: FileKind) -> str:
        extension = validate_upload(content, filename, kind)
        folder = self.root / FOLDERS[kind]
        folder.mkdir(parents=True, exist_ok=True)
        name = f"{kind.value}-{uuid.uuid4().hex}{extension}"
        (folder / name).write_bytes(content)
        reference = f"{FOLDERS[kind]}/{name}"
        logger.info(f"Stored {kind.value} upload at {reference}")
        return reference

    def delete(self, reference: Optional[str]) -> bool:
        if not reference:
            return False
        path = (self.root / reference).resolve()
        if self.root.resolve() not in path.parents:
            logger.warning(f"Refusing to delete file outside upload dir: {reference}")
            return False
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete upload {reference}: {str(e)}")
            return False


class CloudinaryFileStorage:
    """Stores uploads on Cloudinary; references are secure URLs."""

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )

    def store(self, content: bytes, filename: str, kind: FileKind) -> str:
        validate_upload(content, filename, kind)
        options = {
            "folder": f"naus/{FOLDERS[kind]}",
            "use_filename": True,
            "unique_filename": True,
            "overwrite": False,
        }
        if kind == FileKind.PHOTO:
            options["resource_type"] = "image"
            options["transformation"] = [{"width": 500, "height": 500, "crop": "limit", "quality": "auto"}]
        else:
            options["resource_type"] = "auto"

        result = cloudinary.uploader.upload(io.BytesIO(content), **options)
        logger.info(f"Uploaded {kind.value} to Cloudinary: {result['public_id']}")
        return result["secure_url"]

    @staticmethod
    def public_id_from_url(url: Optional[str]) -> Optional[str]:
        # https://res.cloudinary.com/<cloud>/image/upload/v1234567890/folder/filename.ext
        if not url:
            return None
        # Raw resources (.doc, .docx) keep their extension in the public id
        if "/raw/" in url:
            match = re.search(r"/v\d+/(.+)$", url)
        else:
            match = re.search(r"/v\d+/(.+)\.\w+$", url)
        return match.group(1) if match else None

    def delete(self, reference: Optional[str]) -> bool:
        public_id = self.public_id_from_url(reference)
        if not public_id:
            return False
        resource_type = "raw" if "/raw/" in reference else "image"
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
            return result.get("result") == "ok"
        except Exception as e:
            logger.error(f"Error deleting {public_id} from Cloudinary: {str(e)}")
            return False


_storage = None


def get_file_storage():
    """FastAPI dependency returning the configured storage backend."""
    global _storage
    if _storage is None:
        _storage = CloudinaryFileStorage() if settings.use_cloudinary else LocalFileStorage()
    return _storage
