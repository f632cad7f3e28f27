"""
Payments Models - Payment requests and invoices.

This module defines:
- Payment: an artisan's request to be paid for a completed project
- Invoice: derived from a completed payment (tax at INVOICE_TAX_RATE)

Amounts are whole euros.
"""

import secrets
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.db.models import BaseModel
from core.lifecycle import StatusLifecycle


def compute_tax(amount: int) -> int:
    """round(amount x tax rate), halves rounded up: 450 -> 90."""
    rate = Decimal(str(getattr(settings, 'INVOICE_TAX_RATE', '0.20')))
    return int((Decimal(amount) * rate).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def generate_invoice_number(issue_date=None) -> str:
    issue_date = issue_date or timezone.localdate()
    return f"INV-{issue_date:%Y%m%d}-{secrets.token_hex(3).upper()}"


# ============================================================================
# PAYMENT
# ============================================================================

class Payment(BaseModel):
    """Payment of a completed project, requested by its artisan."""

    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        PROCESSING = 'processing', _('Processing')
        COMPLETED = 'completed', _('Completed')
        FAILED = 'failed', _('Failed')

    LIFECYCLE = StatusLifecycle('Payment', {
        Status.PENDING: {Status.PROCESSING},
        Status.PROCESSING: {Status.COMPLETED, Status.FAILED},
    })

    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.PROTECT,
        related_name='payments'
    )
    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payments_received'
    )
    gestionnaire = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payments_made'
    )
    amount = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    invoice_url = models.CharField(max_length=500, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(blank=True)

    class Meta(BaseModel.Meta):
        verbose_name = _('Payment')
        verbose_name_plural = _('Payments')
        indexes = [
            models.Index(fields=['artisan', 'status'], name='payment_artisan_status_idx'),
            models.Index(fields=['gestionnaire', 'status'], name='payment_gest_status_idx'),
        ]
        constraints = [
            # a failed payment may be requested again
            models.UniqueConstraint(
                fields=['project'],
                condition=~models.Q(status='failed'),
                name='unique_active_payment_per_project'
            ),
        ]

    def __str__(self):
        return f"Payment {self.amount} EUR for {self.project_id} ({self.status})"

    def transition_to(self, status: str, save: bool = True) -> None:
        self.LIFECYCLE.check(self.status, status)
        self.status = status
        if status == self.Status.COMPLETED:
            self.processed_at = timezone.now()
        if save:
            self.save(update_fields=['status', 'processed_at', 'failure_reason', 'updated_at'])


# ============================================================================
# INVOICE
# ============================================================================

class Invoice(BaseModel):
    """Invoice for a completed payment. total_amount == amount + tax_amount."""

    class Status(models.TextChoices):
        DRAFT = 'draft', _('Draft')
        SENT = 'sent', _('Sent')
        PAID = 'paid', _('Paid')
        OVERDUE = 'overdue', _('Overdue')

    LIFECYCLE = StatusLifecycle('Invoice', {
        Status.DRAFT: {Status.SENT},
        Status.SENT: {Status.PAID, Status.OVERDUE},
        Status.OVERDUE: {Status.PAID},
    })

    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    payment = models.OneToOneField(
        Payment,
        on_delete=models.PROTECT,
        related_name='invoice'
    )
    invoice_number = models.CharField(max_length=32, unique=True)
    amount = models.PositiveIntegerField()
    tax_amount = models.PositiveIntegerField()
    total_amount = models.PositiveIntegerField()
    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True
    )
    pdf_url = models.CharField(max_length=500, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta(BaseModel.Meta):
        verbose_name = _('Invoice')
        verbose_name_plural = _('Invoices')

    def __str__(self):
        return self.invoice_number

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            self.invoice_number = generate_invoice_number(self.issue_date)
        if self.tax_amount is None:
            self.tax_amount = compute_tax(self.amount)
        self.total_amount = self.amount + self.tax_amount
        if not self.due_date:
            days = getattr(settings, 'INVOICE_DUE_DAYS', 30)
            self.due_date = self.issue_date + timedelta(days=days)
        super().save(*args, **kwargs)

    @property
    def is_past_due(self) -> bool:
        return self.status == self.Status.SENT and self.due_date < timezone.localdate()

    def transition_to(self, status: str) -> None:
        self.LIFECYCLE.check(self.status, status)
        self.status = status
        fields = ['status', 'updated_at']
        if status == self.Status.PAID:
            self.paid_at = timezone.now()
            fields.append('paid_at')
        self.save(update_fields=fields)
