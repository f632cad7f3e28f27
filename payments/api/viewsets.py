"""
Payments API ViewSets.

Endpoints:
- GET/POST /payments/                    list (role-scoped) / artisan requests payment
- GET      /payments/summary/            totals and counts by status
- POST     /payments/{id}/process/       gestionnaire pays through the gateway
- POST     /payments/{id}/invoice/       generate (or fetch) the invoice
- GET      /invoices/
- POST     /invoices/{id}/mark-paid/
- POST     /invoices/{id}/mark-overdue/
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsArtisan, IsGestionnaire
from core.viewsets import SecureReadOnlyViewSet, SecureViewSet

from ..serializers import (
    InvoiceSerializer,
    PaymentRequestSerializer,
    PaymentSerializer,
    PaymentSummarySerializer,
)
from ..services import InvoiceService, PaymentService


class PaymentViewSet(SecureViewSet):
    http_method_names = ['get', 'post', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['status', 'project']
    ordering_fields = ['created_at', 'amount', 'processed_at']
    ordering = ['-created_at']
    action_permissions = {
        'create': [permissions.IsAuthenticated, IsArtisan],
        'process': [permissions.IsAuthenticated, IsGestionnaire],
    }

    def get_queryset(self):
        return PaymentService.visible_to(self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return PaymentRequestSerializer
        if self.action == 'summary':
            return PaymentSummarySerializer
        return PaymentSerializer

    def create(self, request, *args, **kwargs):
        serializer = PaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentService.request(
            request.user,
            serializer.validated_data['project'],
            amount=serializer.validated_data.get('amount'),
            description=serializer.validated_data['description'],
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def process(self, request, pk=None):
        payment = PaymentService.process(self.get_object(), request.user)
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['post'])
    def invoice(self, request, pk=None):
        invoice, created = InvoiceService.generate(self.get_object(), request.user)
        return Response(
            InvoiceSerializer(invoice).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(PaymentSummarySerializer(PaymentService.summary(request.user)).data)


class InvoiceViewSet(SecureReadOnlyViewSet):
    serializer_class = InvoiceSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['status']
    ordering_fields = ['issue_date', 'due_date', 'total_amount']
    ordering = ['-issue_date']

    def get_queryset(self):
        return InvoiceService.visible_to(self.request.user)

    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        invoice = InvoiceService.mark_paid(self.get_object(), request.user)
        return Response(InvoiceSerializer(invoice).data)

    @action(detail=True, methods=['post'], url_path='mark-overdue')
    def mark_overdue(self, request, pk=None):
        invoice = InvoiceService.mark_overdue(self.get_object(), request.user)
        return Response(InvoiceSerializer(invoice).data)
