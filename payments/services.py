"""
Payments Services - Business Logic Layer

- PaymentService: payment requests, gateway processing, summaries
- InvoiceService: invoice generation and invoice status moves

Processing holds a row lock on the payment so a payment is charged at most
once. A successful charge marks the project paid in the same transaction.
"""

import logging
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.urls import reverse
from django.utils import timezone

from api.exceptions import BusinessRuleViolation, NotParticipant, PaymentGatewayError, RoleRequired
from core.validators import sanitize_text
from notifications.models import Notification
from notifications.services import notify
from projects.models import Project, TimelineEntry
from projects.services import ProjectService, TimelineService

from .gateways import get_gateway
from .models import Invoice, Payment

logger = logging.getLogger(__name__)

PAYMENT_REQUESTED_MESSAGE = "Paiement de {amount} € demandé"
PAYMENT_RECEIVED_MESSAGE = "Paiement de {amount} € reçu"


def _scope_to_user(queryset: QuerySet, user, prefix: str = '') -> QuerySet:
    if user.is_platform_admin:
        return queryset
    if user.is_artisan:
        return queryset.filter(**{f'{prefix}artisan': user})
    return queryset.filter(**{f'{prefix}gestionnaire': user})


# =============================================================================
# PAYMENT SERVICE
# =============================================================================

class PaymentService:
    """Payment registry operations."""

    @staticmethod
    def visible_to(user) -> QuerySet:
        return _scope_to_user(Payment.objects.select_related('project', 'artisan', 'gestionnaire'), user)

    @staticmethod
    @transaction.atomic
    def request(artisan, project: Project, amount: Optional[int] = None, description: str = '') -> Payment:
        """
        Artisan asks to be paid for a completed project.

        Amount defaults to the project price; only one payment that has not
        failed may exist per project.
        """
        if not artisan.is_artisan:
            raise RoleRequired(required_role='artisan')
        if project.artisan_id != artisan.pk:
            raise NotParticipant("Only the project's artisan can request its payment.")

        locked = Project.objects.select_for_update().get(pk=project.pk)
        if locked.status != Project.Status.COMPLETED:
            raise BusinessRuleViolation(
                "Payment can only be requested once the project is completed.",
                rule='payment_after_completion',
            )
        if locked.payments.exclude(status=Payment.Status.FAILED).exists():
            raise BusinessRuleViolation(
                "A payment has already been requested for this project.",
                rule='single_payment_per_project',
            )

        amount = locked.price if amount is None else amount
        if amount <= 0:
            raise BusinessRuleViolation("Amount must be positive.", rule='positive_amount')

        try:
            with transaction.atomic():
                payment = Payment.objects.create(
                    project=locked,
                    artisan=artisan,
                    gestionnaire=locked.gestionnaire,
                    amount=amount,
                    description=sanitize_text(description or ''),
                )
        except IntegrityError:
            raise BusinessRuleViolation(
                "A payment has already been requested for this project.",
                rule='single_payment_per_project',
            )

        TimelineService.add_entry(
            locked,
            TimelineEntry.EntryType.PAYMENT,
            PAYMENT_REQUESTED_MESSAGE.format(amount=amount),
            author=artisan.display_name,
            author_user=artisan,
        )
        notify(
            locked.gestionnaire,
            Notification.Type.PROJECT_UPDATE,
            "Demande de paiement",
            f"{artisan.display_name} demande {amount} € pour « {locked.title} ».",
            related_id=payment.id,
        )
        logger.info(f"PAYMENT_REQUESTED: payment={payment.id} project={locked.id} amount={amount}")
        return payment

    @staticmethod
    @transaction.atomic
    def process(payment: Payment, user) -> Payment:
        """
        pending -> processing -> completed | failed.

        A gateway error does not propagate: the payment is stored as failed
        with the gateway's reason and returned.
        """
        if payment.gestionnaire_id != user.pk and not user.is_platform_admin:
            raise NotParticipant("Only the project's gestionnaire can process this payment.")

        locked = Payment.objects.select_for_update().select_related('project').get(pk=payment.pk)
        locked.transition_to(Payment.Status.PROCESSING)

        try:
            reference = get_gateway().charge(locked)
        except PaymentGatewayError as exc:
            locked.failure_reason = exc.reason
            locked.transition_to(Payment.Status.FAILED)
            logger.warning(f"PAYMENT_FAILED: payment={locked.id} reason={exc.reason!r}")
            return locked

        locked.transition_to(Payment.Status.COMPLETED)
        TimelineService.add_entry(
            locked.project,
            TimelineEntry.EntryType.PAYMENT,
            PAYMENT_RECEIVED_MESSAGE.format(amount=locked.amount),
        )
        ProjectService.mark_paid(locked.project)

        notify(
            locked.artisan,
            Notification.Type.PAYMENT_RECEIVED,
            "Paiement reçu",
            f"Vous avez reçu {locked.amount} € pour « {locked.project.title} ».",
            related_id=locked.id,
        )
        logger.info(f"PAYMENT_COMPLETED: payment={locked.id} reference={reference} user={user.id}")
        return locked

    @staticmethod
    def summary(user) -> dict:
        """Completed and pending totals plus counts by status, for the user's payments."""
        queryset = _scope_to_user(Payment.objects.all(), user)
        totals = queryset.aggregate(
            total_completed=Sum('amount', filter=Q(status=Payment.Status.COMPLETED)),
            total_pending=Sum(
                'amount',
                filter=Q(status__in=[Payment.Status.PENDING, Payment.Status.PROCESSING])
            ),
        )
        counts = {value: 0 for value in Payment.Status.values}
        for row in queryset.values('status').annotate(count=Count('id')):
            counts[row['status']] = row['count']

        return {
            'total_completed': totals['total_completed'] or 0,
            'total_pending': totals['total_pending'] or 0,
            'count': sum(counts.values()),
            'by_status': counts,
        }


# =============================================================================
# INVOICE SERVICE
# =============================================================================

class InvoiceService:
    """Invoices derived from completed payments."""

    @staticmethod
    def visible_to(user) -> QuerySet:
        return _scope_to_user(Invoice.objects.select_related('payment', 'project'), user, prefix='payment__')

    @staticmethod
    @transaction.atomic
    def generate(payment: Payment, user) -> Tuple[Invoice, bool]:
        """
        Invoice for a completed payment. Returns (invoice, created); a second
        call returns the existing invoice.
        """
        if user.pk not in (payment.artisan_id, payment.gestionnaire_id) and not user.is_platform_admin:
            raise NotParticipant()

        locked = Payment.objects.select_for_update().get(pk=payment.pk)
        existing = Invoice.objects.filter(payment=locked).first()
        if existing:
            return existing, False

        if locked.status != Payment.Status.COMPLETED:
            raise BusinessRuleViolation(
                "Invoices can only be generated for completed payments.",
                rule='invoice_after_payment',
            )

        invoice = Invoice.objects.create(
            project_id=locked.project_id,
            payment=locked,
            amount=locked.amount,
            status=Invoice.Status.SENT,
        )
        locked.invoice_url = reverse('payments:invoice-detail', kwargs={'pk': invoice.pk})
        locked.save(update_fields=['invoice_url', 'updated_at'])

        logger.info(
            f"INVOICE_GENERATED: invoice={invoice.invoice_number} payment={locked.id} "
            f"amount={invoice.amount} tax={invoice.tax_amount} total={invoice.total_amount}"
        )
        return invoice, True

    @staticmethod
    def _ensure_can_update(invoice: Invoice, user) -> None:
        if user.is_platform_admin or invoice.payment.gestionnaire_id == user.pk:
            return
        raise NotParticipant("Only the gestionnaire or an administrator can change an invoice status.")

    @staticmethod
    @transaction.atomic
    def mark_paid(invoice: Invoice, user) -> Invoice:
        InvoiceService._ensure_can_update(invoice, user)
        locked = Invoice.objects.select_for_update().get(pk=invoice.pk)
        locked.transition_to(Invoice.Status.PAID)
        logger.info(f"INVOICE_PAID: invoice={locked.invoice_number} user={user.id}")
        return locked

    @staticmethod
    @transaction.atomic
    def mark_overdue(invoice: Invoice, user) -> Invoice:
        InvoiceService._ensure_can_update(invoice, user)
        locked = Invoice.objects.select_for_update().get(pk=invoice.pk)
        locked.transition_to(Invoice.Status.OVERDUE)
        logger.info(f"INVOICE_OVERDUE: invoice={locked.invoice_number} user={user.id}")
        return locked

    @staticmethod
    def mark_past_due_overdue() -> int:
        """Flag every sent invoice whose due date has passed. Used by the daily task."""
        count = Invoice.objects.filter(
            status=Invoice.Status.SENT,
            due_date__lt=timezone.localdate(),
        ).update(status=Invoice.Status.OVERDUE, updated_at=timezone.now())
        if count:
            logger.info(f"INVOICES_OVERDUE: count={count}")
        return count
