"""
API error envelope tests.
"""

import pytest
from django.http import Http404
from rest_framework import exceptions

from api.exceptions import (
    BusinessRuleViolation,
    InvalidStatusTransition,
    PaymentGatewayError,
    RoleRequired,
    manopro_exception_handler,
)


def handle(exc):
    return manopro_exception_handler(exc, {'view': None})


class TestExceptionHandler:

    def test_invalid_transition_envelope(self):
        response = handle(InvalidStatusTransition(
            entity='Emergency', current_status='closed', target_status='in_progress', allowed=[]
        ))

        assert response.status_code == 409
        assert response.data['success'] is False
        assert response.data['error_code'] == 'INVALID_STATUS_TRANSITION'
        assert response.data['meta']['current_status'] == 'closed'
        assert 'timestamp' in response.data['meta']

    def test_business_rule_carries_rule_name(self):
        response = handle(BusinessRuleViolation("Déjà proposé.", rule='single_proposal_per_artisan'))

        assert response.status_code == 400
        assert response.data['error_code'] == 'BUSINESS_RULE_VIOLATION'
        assert response.data['message'] == "Déjà proposé."
        assert response.data['meta']['rule'] == 'single_proposal_per_artisan'

    def test_role_required(self):
        response = handle(RoleRequired(required_role='artisan'))

        assert response.status_code == 403
        assert response.data['error_code'] == 'ROLE_REQUIRED'

    def test_gateway_error(self):
        response = handle(PaymentGatewayError(reason='Card declined'))

        assert response.status_code == 502
        assert response.data['error_code'] == 'PAYMENT_GATEWAY_ERROR'
        assert response.data['message'] == 'Card declined'

    def test_validation_error_lists_fields(self):
        response = handle(exceptions.ValidationError({'price': ['Must be positive.']}))

        assert response.status_code == 400
        assert response.data['error_code'] == 'VALIDATION_ERROR'
        assert response.data['errors'] == [{'field': 'price', 'messages': ['Must be positive.']}]

    def test_validation_error_fields_are_camel_case(self):
        response = handle(exceptions.ValidationError({
            'max_budget': ['Must be positive.'],
            'non_field_errors': ['Invalid.'],
        }))

        assert [error['field'] for error in response.data['errors']] == ['maxBudget', 'nonFieldErrors']

    def test_http404_is_not_found(self):
        response = handle(Http404())

        assert response.status_code == 404
        assert response.data['error_code'] == 'NOT_FOUND'

    def test_unhandled_exception_is_internal_error(self):
        response = handle(RuntimeError('boom'))

        assert response.status_code == 500
        assert response.data['error_code'] == 'INTERNAL_ERROR'
        assert 'boom' not in response.data['message']
