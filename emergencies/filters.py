"""
Emergencies API Filters
"""

import django_filters

from core.constants import TRADE_CHOICES

from .models import Emergency, Proposal


class EmergencyFilter(django_filters.FilterSet):
    """Filter emergencies by status, trade, arrondissement and urgency."""

    status = django_filters.ChoiceFilter(choices=Emergency.Status.choices)
    trade = django_filters.ChoiceFilter(choices=TRADE_CHOICES)
    arrondissement = django_filters.NumberFilter()
    urgency_level = django_filters.ChoiceFilter(choices=Emergency.UrgencyLevel.choices)
    min_budget = django_filters.NumberFilter(field_name='max_budget', lookup_expr='gte')

    class Meta:
        model = Emergency
        fields = ['status', 'trade', 'arrondissement', 'urgency_level']


class OpportunityFilter(django_filters.FilterSet):
    urgency_level = django_filters.ChoiceFilter(choices=Emergency.UrgencyLevel.choices)

    class Meta:
        model = Emergency
        fields = ['urgency_level']


class ProposalFilter(django_filters.FilterSet):
    emergency = django_filters.UUIDFilter(field_name='emergency_id')
    status = django_filters.ChoiceFilter(choices=Proposal.Status.choices)

    class Meta:
        model = Proposal
        fields = ['emergency', 'status']
