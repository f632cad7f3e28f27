"""
Upload storage helpers.

Photos are written to Django's default storage (local filesystem in
development, S3 through django-storages when STORAGE_BACKEND=s3) and
referenced by their public URL.

Usage:
    from core.storage import ensure_stored_urls, store_photos

    urls = store_photos(request.FILES.getlist('photos'), f'emergencies/{emergency.id}')
    photos = ensure_stored_urls(frame.get('photos'))
"""

import logging
import os
import uuid
from typing import Iterable, List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

from core.validators import validate_image_upload

logger = logging.getLogger(__name__)


def build_upload_path(prefix: str, filename: str) -> str:
    """Collision-free storage path keeping the original extension."""
    ext = os.path.splitext(filename or '')[1].lower()
    return f"{prefix.strip('/')}/{uuid.uuid4().hex}{ext}"


def store_photos(files: Iterable, prefix: str) -> List[str]:
    """
    Validate and save uploaded photos, returning their public URLs.

    Every file is validated before anything is written so that a bad file
    never leaves a partial upload behind.
    """
    files = list(files)
    if not files:
        raise ValidationError({'photos': ["At least one photo is required."]})

    for file in files:
        try:
            validate_image_upload(file)
        except DjangoValidationError as exc:
            raise ValidationError({'photos': exc.messages})

    urls = []
    for file in files:
        name = default_storage.save(build_upload_path(prefix, file.name), file)
        urls.append(default_storage.url(name))

    logger.info(f"PHOTOS_STORED: prefix={prefix} count={len(urls)}")
    return urls


def storage_base_url() -> str:
    return default_storage.url('')


def ensure_stored_urls(urls: Iterable[str]) -> List[str]:
    """
    Accept only URLs served by this deployment's storage.

    Clients may reference photos they uploaded earlier; links to any other
    host are refused.
    """
    urls = list(urls or [])
    base = storage_base_url()
    foreign = [url for url in urls if not str(url).startswith(base)]
    if foreign:
        logger.warning(f"FOREIGN_PHOTO_URLS_REJECTED: count={len(foreign)}")
        raise ValidationError({'photos': [f"Photos must be uploaded to {base}."]})
    return urls
