"""
Payments API URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .viewsets import InvoiceViewSet, PaymentViewSet

app_name = 'payments'

router = DefaultRouter()
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'invoices', InvoiceViewSet, basename='invoice')

urlpatterns = [
    path('', include(router.urls)),
]
