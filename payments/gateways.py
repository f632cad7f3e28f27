"""
Payment gateways.

The gateway used by PaymentService is configured with the dotted path in
settings.PAYMENT_GATEWAY. A gateway charges one payment and either returns
a provider reference or raises PaymentGatewayError.

Usage:
    gateway = get_gateway()
    reference = gateway.charge(payment)
"""

import logging
import uuid

from django.conf import settings
from django.utils.module_loading import import_string

from api.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = 'payments.gateways.ImmediateGateway'


class PaymentGateway:
    """Interface every gateway implements."""

    name = 'base'

    def charge(self, payment) -> str:
        raise NotImplementedError


class ImmediateGateway(PaymentGateway):
    """Accepts every charge at once. Used until a real provider is wired in."""

    name = 'immediate'

    def charge(self, payment) -> str:
        reference = f"imm_{uuid.uuid4().hex[:16]}"
        logger.info(f"GATEWAY_CHARGE: gateway={self.name} payment={payment.id} amount={payment.amount} ref={reference}")
        return reference


class DecliningGateway(PaymentGateway):
    """Declines every charge; for staging environments and tests."""

    name = 'declining'
    reason = "Card declined"

    def charge(self, payment) -> str:
        raise PaymentGatewayError(reason=self.reason)


def get_gateway() -> PaymentGateway:
    path = getattr(settings, 'PAYMENT_GATEWAY', DEFAULT_GATEWAY) or DEFAULT_GATEWAY
    return import_string(path)()
