"""Local blob storage for uploaded receipt images.

Files are written under an upload directory and exposed through signed,
expiring URLs that the file route verifies before serving.
"""

import hashlib
import hmac
import re
import time
from pathlib import Path
from urllib.parse import urlencode

from purchase_ocr.utils.config import StorageConfig
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class BlobStoreError(Exception):
    """Raised when a blob cannot be written or resolved."""


def safe_filename(name: str | None) -> str:
    """Replace characters outside ``[a-zA-Z0-9._-]`` with underscores."""
    return _UNSAFE_NAME_CHARS.sub("_", name or "upload")


class LocalBlobStore:
    """Saves blobs to disk and issues HMAC-signed read URLs.

    Args:
        config: Storage configuration with directory, base URL and secret.
    """

    def __init__(self, config: StorageConfig) -> None:
        self.root = Path(config.upload_dir)
        self.base_url = config.public_base_url.rstrip("/")
        self.secret = config.signing_secret.encode()
        self.ttl_seconds = config.url_ttl_seconds

    def save(self, data: bytes, filename: str | None, prefix: str = "ocr_uploads") -> str:
        """Write a blob and return a signed URL for it.

        Args:
            data: File contents.
            filename: Original client filename, sanitised before use.
            prefix: Folder under the upload root.

        Returns:
            Signed URL valid for the configured TTL.

        Raises:
            BlobStoreError: If the file cannot be written.
        """
        name = f"{prefix}/{int(time.time() * 1000)}_{safe_filename(filename)}"
        path = self.root / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise BlobStoreError(f"failed to write {name}: {exc}") from exc

        logger.info("Stored upload %s (%d bytes)", name, len(data))
        return self.signed_url(name)

    def signed_url(self, name: str, expires_at: int | None = None) -> str:
        if expires_at is None:
            expires_at = int(time.time()) + self.ttl_seconds
        query = urlencode({"expires": expires_at, "signature": self._sign(name, expires_at)})
        return f"{self.base_url}/{name}?{query}"

    def _sign(self, name: str, expires_at: int) -> str:
        message = f"{name}:{expires_at}".encode()
        return hmac.new(self.secret, message, hashlib.sha256).hexdigest()

    def resolve(self, name: str, expires_at: int, signature: str) -> Path:
        """Validate a signed URL's parameters and return the file path.

        Raises:
            BlobStoreError: If the signature is wrong, the URL expired, or
                the file is missing or outside the upload root.
        """
        if not hmac.compare_digest(self._sign(name, expires_at), signature):
            raise BlobStoreError("invalid signature")
        if expires_at < time.time():
            raise BlobStoreError("url expired")

        path = (self.root / name).resolve()
        if self.root.resolve() not in path.parents or not path.is_file():
            raise BlobStoreError(f"no such blob: {name}")
        return path
