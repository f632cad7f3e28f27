"""
Emergencies API URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .viewsets import EmergencyViewSet, OpportunityViewSet, ProposalViewSet

app_name = 'emergencies'

router = DefaultRouter()
router.register(r'emergencies', EmergencyViewSet, basename='emergency')
router.register(r'opportunities', OpportunityViewSet, basename='opportunity')
router.register(r'proposals', ProposalViewSet, basename='proposal')

urlpatterns = [
    path('', include(router.urls)),
]
