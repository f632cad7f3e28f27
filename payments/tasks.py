"""
Payments Celery Tasks
"""

import logging

from celery import shared_task
from django.utils import timezone

from .services import InvoiceService

logger = logging.getLogger(__name__)


@shared_task
def mark_overdue_invoices():
    """
    Daily sweep flagging sent invoices past their due date as overdue.
    """
    count = InvoiceService.mark_past_due_overdue()
    return {
        'status': 'success',
        'overdue': count,
        'checked_at': timezone.now().isoformat(),
    }
