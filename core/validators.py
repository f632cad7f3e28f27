"""
Core Validators - Input validation and sanitization utilities.

This module provides:
- Text sanitization with nh3 (user-supplied titles, descriptions, chat)
- Image upload validation (size and extension)
- Arrondissement and trade validators

Usage:
    from core.validators import sanitize_text, validate_image_upload

    clean = sanitize_text(request.data['message'])
    validate_image_upload(uploaded_file)
"""

import html
import logging
import os
from typing import Optional, Set

import nh3
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from core.constants import ARRONDISSEMENT_MAX, ARRONDISSEMENT_MIN, TRADES

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security.validators')


# =============================================================================
# TEXT SANITIZATION
# =============================================================================

def sanitize_text(content: Optional[str]) -> Optional[str]:
    """
    Strip every HTML tag from user-supplied text.

    The text content is kept, entities produced by the cleaner are decoded
    so that French punctuation and ampersands are stored as typed.
    """
    if not content:
        return content

    cleaned = html.unescape(nh3.clean(content, tags=set(), strip_comments=True))
    if cleaned != content:
        security_logger.info("TEXT_SANITIZED: markup removed from user input")
    return cleaned.strip()


# =============================================================================
# FILE UPLOAD VALIDATION
# =============================================================================

def _allowed_image_extensions() -> Set[str]:
    return {f".{ext.lower()}" for ext in getattr(settings, 'ALLOWED_IMAGE_EXTENSIONS', [])}


def validate_image_upload(file) -> None:
    """
    Validate an uploaded photo.

    Raises ValidationError when the file exceeds MAX_UPLOAD_SIZE_MB or has an
    extension outside ALLOWED_IMAGE_EXTENSIONS.
    """
    max_mb = getattr(settings, 'MAX_UPLOAD_SIZE_MB', 10)
    max_size = max_mb * 1024 * 1024

    if file.size > max_size:
        raise ValidationError(
            _("File size exceeds maximum of %(max)sMB"),
            code='file_too_large',
            params={'max': max_mb},
        )

    ext = os.path.splitext((file.name or '').lower())[1]
    allowed = _allowed_image_extensions()
    if allowed and ext not in allowed:
        security_logger.warning(f"UPLOAD_REJECTED: extension={ext!r}")
        raise ValidationError(
            _("File extension '%(ext)s' not allowed."),
            code='invalid_extension',
            params={'ext': ext},
        )


# =============================================================================
# DOMAIN VALIDATORS
# =============================================================================

def validate_arrondissement(value: int) -> None:
    if not ARRONDISSEMENT_MIN <= value <= ARRONDISSEMENT_MAX:
        raise ValidationError(
            _("Arrondissement must be between %(min)s and %(max)s."),
            code='invalid_arrondissement',
            params={'min': ARRONDISSEMENT_MIN, 'max': ARRONDISSEMENT_MAX},
        )


def validate_arrondissement_list(values) -> None:
    if not isinstance(values, list):
        raise ValidationError(_("Expected a list of arrondissements."), code='invalid')
    for value in values:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(_("Arrondissements must be integers."), code='invalid')
        validate_arrondissement(value)


def validate_trade_list(values) -> None:
    if not isinstance(values, list):
        raise ValidationError(_("Expected a list of trades."), code='invalid')
    unknown = [value for value in values if value not in TRADES]
    if unknown:
        raise ValidationError(
            _("Unknown trade(s): %(trades)s"),
            code='invalid_trade',
            params={'trades': ', '.join(map(str, unknown))},
        )
