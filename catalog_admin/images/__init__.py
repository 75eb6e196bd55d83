"""
Product image upload.
"""

from .image_store import (
    ALLOWED_TYPES,
    MAX_FILE_SIZE,
    ImageFile,
    ImageStore,
    ImageUploadError,
    SupabaseImageStore,
    UploadedImage,
)

__all__ = [
    'ALLOWED_TYPES',
    'MAX_FILE_SIZE',
    'ImageFile',
    'ImageStore',
    'ImageUploadError',
    'SupabaseImageStore',
    'UploadedImage',
]
