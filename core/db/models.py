"""
Base Models for Mano-Pro

Abstract base model shared by every registry: UUID primary key plus
creation/update timestamps, newest first by default.
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base model with UUID primary key and timestamps.

    Example:
        class Emergency(BaseModel):
            title = models.CharField(max_length=200)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_('ID')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name=_('Created at')
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        db_index=True,
        verbose_name=_('Updated at')
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']
