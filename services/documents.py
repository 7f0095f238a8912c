"""
Uploaded documents: validate the incoming file, put it in a bucket under a
unique name, and clean it up again when its row goes away.
"""

import os
import random
import time

from werkzeug.utils import secure_filename

from services.backend_client import BackendClient

PDF_TYPES = {".pdf"}
IMAGE_TYPES = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

MAX_DOCUMENT_BYTES = 20 * 1024 * 1024
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_AVATAR_BYTES = 2 * 1024 * 1024


class InvalidUpload(Exception):
    pass


def extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def safe_name(filename: str) -> str:
    return secure_filename(filename or "") or "file"


def check_upload(filename: str, data: bytes, allowed: set, max_bytes: int, kind: str = "file"):
    if extension(filename) not in allowed:
        raise InvalidUpload(f"Please upload a {kind} ({', '.join(sorted(allowed))})")
    if not data:
        raise InvalidUpload("Uploaded file is empty")
    if len(data) > max_bytes:
        raise InvalidUpload(f"File size must be less than {max_bytes // (1024 * 1024)}MB")


def store(client: BackendClient, bucket: str, folder: str, filename: str, data: bytes,
          allowed: set = PDF_TYPES, max_bytes: int = MAX_DOCUMENT_BYTES, kind: str = "PDF file"):
    """Returns (public_url, original file name)."""
    check_upload(filename, data, allowed, max_bytes, kind)
    # Unique naam: time + random, original naam end mein
    unique = f"{int(time.time() * 1000)}_{random.randint(1000, 9999)}_{safe_name(filename)}"
    url = client.upload_file(bucket, f"{folder}/{unique}", data)
    return url, filename


def discard(client: BackendClient, bucket: str, url: str):
    """Remove the stored object behind 'url'. Outside links are left alone."""
    path = client.path_from_public_url(bucket, url)
    if path:
        client.remove_file(bucket, path)
