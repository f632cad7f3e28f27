"""
Payments API tests.
"""

import pytest
from django.test import override_settings
from rest_framework import status

from payments.models import Invoice, Payment

PAYMENTS_URL = '/api/v1/payments/'
INVOICES_URL = '/api/v1/invoices/'


@pytest.mark.django_db
class TestPaymentEndpoints:

    def test_artisan_requests_payment(self, completed_project, artisan_client):
        response = artisan_client.post(PAYMENTS_URL, {
            'project': str(completed_project.id),
            'description': 'Remplacement joint',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['amount'] == completed_project.price
        assert response.data['status'] == 'pending'
        assert response.data['invoice_id'] is None

    def test_request_before_completion(self, project, artisan_client):
        response = artisan_client.post(PAYMENTS_URL, {'project': str(project.id)})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['meta']['rule'] == 'payment_after_completion'

    def test_gestionnaire_cannot_request(self, completed_project, gestionnaire_client):
        response = gestionnaire_client.post(PAYMENTS_URL, {'project': str(completed_project.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_is_scoped(self, completed_project, payment_factory, artisan_client, other_artisan_client):
        payment = payment_factory(project=completed_project)

        mine = artisan_client.get(PAYMENTS_URL)
        theirs = other_artisan_client.get(PAYMENTS_URL)

        assert [item['id'] for item in mine.data['data']] == [str(payment.id)]
        assert theirs.data['data'] == []

    def test_process(self, completed_project, payment_factory, gestionnaire_client):
        payment = payment_factory(project=completed_project)

        response = gestionnaire_client.post(f'{PAYMENTS_URL}{payment.id}/process/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'completed'
        assert response.data['processed_at'] is not None

    @override_settings(PAYMENT_GATEWAY='payments.gateways.DecliningGateway')
    def test_process_declined(self, completed_project, payment_factory, gestionnaire_client):
        payment = payment_factory(project=completed_project)

        response = gestionnaire_client.post(f'{PAYMENTS_URL}{payment.id}/process/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'failed'
        assert response.data['failure_reason'] == 'Card declined'

    def test_process_twice_is_conflict(self, completed_project, payment_factory, gestionnaire_client):
        payment = payment_factory(project=completed_project)
        gestionnaire_client.post(f'{PAYMENTS_URL}{payment.id}/process/')

        response = gestionnaire_client.post(f'{PAYMENTS_URL}{payment.id}/process/')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Payment.objects.get(pk=payment.pk).status == 'completed'

    def test_artisan_cannot_process(self, completed_project, payment_factory, artisan_client):
        payment = payment_factory(project=completed_project)

        response = artisan_client.post(f'{PAYMENTS_URL}{payment.id}/process/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invoice_created_then_returned(self, payment_factory, client_for):
        payment = payment_factory(status='completed', amount=450)
        client = client_for(payment.gestionnaire)

        first = client.post(f'{PAYMENTS_URL}{payment.id}/invoice/')
        second = client.post(f'{PAYMENTS_URL}{payment.id}/invoice/')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert first.data['id'] == second.data['id']
        assert (first.data['tax_amount'], first.data['total_amount']) == (90, 540)

    def test_summary(self, payment_factory, client_for, artisan):
        payment_factory(project__proposal__artisan=artisan, status='completed', amount=120)

        response = client_for(artisan).get(f'{PAYMENTS_URL}summary/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_completed'] == 120
        assert response.data['by_status']['completed'] == 1
        assert 'totalCompleted' in response.json()


@pytest.mark.django_db
class TestInvoiceEndpoints:

    def test_list_for_both_parties(self, invoice_factory, client_for):
        invoice = invoice_factory()

        for user in (invoice.payment.artisan, invoice.payment.gestionnaire):
            response = client_for(user).get(INVOICES_URL)
            assert [item['id'] for item in response.data['data']] == [str(invoice.id)]

    def test_invoice_url_resolves(self, payment_factory, client_for):
        payment = payment_factory(status='completed')
        client = client_for(payment.gestionnaire)
        client.post(f'{PAYMENTS_URL}{payment.id}/invoice/')
        payment.refresh_from_db()

        response = client.get(payment.invoice_url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payment_id'] == str(payment.id)

    def test_mark_paid(self, invoice_factory, client_for):
        invoice = invoice_factory()

        response = client_for(invoice.payment.gestionnaire).post(f'{INVOICES_URL}{invoice.id}/mark-paid/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'paid'

    def test_mark_overdue_by_artisan_forbidden(self, invoice_factory, client_for):
        invoice = invoice_factory()

        response = client_for(invoice.payment.artisan).post(f'{INVOICES_URL}{invoice.id}/mark-overdue/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Invoice.objects.get(pk=invoice.pk).status == 'sent'

    def test_mark_paid_twice_is_conflict(self, invoice_factory, client_for):
        invoice = invoice_factory(status='paid')

        response = client_for(invoice.payment.gestionnaire).post(f'{INVOICES_URL}{invoice.id}/mark-paid/')

        assert response.status_code == status.HTTP_409_CONFLICT
