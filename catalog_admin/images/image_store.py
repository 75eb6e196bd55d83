"""
Product image storage.

Validates image files and uploads them to blob storage, returning the
public URL the catalog records. SupabaseImageStore talks to the Supabase
Storage REST API.
"""

import logging
import mimetypes
import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import requests

from ..common.text_utils import alt_text_from_filename, current_millis, generate_handle

logger = logging.getLogger(__name__)

ALLOWED_TYPES = frozenset({'image/jpeg', 'image/png', 'image/webp', 'image/gif'})
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB


class ImageUploadError(Exception):
    """An image was rejected or could not be stored."""


@dataclass
class ImageFile:
    """An image to upload."""
    name: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path) -> 'ImageFile':
        """Read an image from disk, guessing its type from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content=path.read_bytes(),
            content_type=content_type or 'application/octet-stream',
        )


@dataclass
class UploadedImage:
    """A stored image."""
    url: str
    path: str
    alt_text: str
    size: int
    content_type: str


def _random_suffix(length: int = 11) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(random.choice(alphabet) for _ in range(length))


def file_extension(image: ImageFile) -> str:
    """Extension from the file name, else from the content type."""
    stem, dot, extension = image.name.rpartition('.')
    if dot and stem and extension:
        return extension.lower()
    guessed = mimetypes.guess_extension(image.content_type or '')
    return guessed.lstrip('.') if guessed else 'bin'


class ImageStore(ABC):
    """
    Base class for image stores.

    Subclasses implement _store(); validation, naming and alt text are
    shared.
    """

    def __init__(
        self,
        allowed_types: Optional[Iterable[str]] = None,
        max_size: int = MAX_FILE_SIZE,
        prefix: str = 'products',
    ):
        self.allowed_types = frozenset(allowed_types) if allowed_types else ALLOWED_TYPES
        self.max_size = max_size
        self.prefix = prefix

    def validate(self, image: ImageFile) -> None:
        """
        Raises:
            ImageUploadError: If the file is missing, of a disallowed type or too large
        """
        if image is None or not image.name:
            raise ImageUploadError('No file provided')
        if image.content_type not in self.allowed_types:
            raise ImageUploadError('Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed.')
        if image.size > self.max_size:
            raise ImageUploadError(
                f"File size too large. Maximum size is {self.max_size // (1024 * 1024)}MB."
            )

    def object_path(self, image: ImageFile, product_handle: Optional[str] = None) -> str:
        """Unique storage path: {prefix}/{handle}-{ms}-{random}.{ext}"""
        stem = generate_handle(product_handle) if product_handle else 'product'
        filename = f"{stem}-{current_millis()}-{_random_suffix()}.{file_extension(image)}"
        return f"{self.prefix}/{filename}"

    def upload(self, image: ImageFile, product_handle: Optional[str] = None) -> UploadedImage:
        """
        Validate and store an image.

        Args:
            image: File to upload
            product_handle: Handle used to name the stored object

        Returns:
            UploadedImage with the public URL and derived alt text

        Raises:
            ImageUploadError: On validation or storage failure
        """
        self.validate(image)
        path = self.object_path(image, product_handle)
        url = self._store(path, image)

        logger.info("Uploaded %s (%d bytes) to %s", image.name, image.size, path)
        return UploadedImage(
            url=url,
            path=path,
            alt_text=alt_text_from_filename(image.name),
            size=image.size,
            content_type=image.content_type,
        )

    @abstractmethod
    def _store(self, path: str, image: ImageFile) -> str:
        """Persist the bytes at path and return the public URL."""


class SupabaseImageStore(ImageStore):
    """
    Image store backed by a Supabase Storage bucket.

    Usage:
        images = SupabaseImageStore(url="https://xyz.supabase.co", api_key="...")
        uploaded = images.upload(ImageFile.from_path("tea.jpg"), "green-tea")
    """

    DEFAULT_BUCKET = 'product-images'

    def __init__(
        self,
        url: str,
        api_key: str,
        bucket: str = DEFAULT_BUCKET,
        timeout: int = 30,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = url.rstrip('/')
        self.bucket = bucket
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f"Bearer {api_key}",
        })

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def _store(self, path: str, image: ImageFile) -> str:
        upload_url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"

        try:
            response = self.session.post(
                upload_url,
                data=image.content,
                headers={'Content-Type': image.content_type, 'x-upsert': 'false'},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ImageUploadError(f"Upload failed: {e}") from e

        if response.status_code >= 400:
            logger.error("Upload error %d: %s", response.status_code, response.text[:200])
            raise ImageUploadError(f"Upload failed: {response.text[:200]}")

        return self.public_url(path)
