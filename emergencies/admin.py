from django.contrib import admin

from .models import Emergency, Proposal


class ProposalInline(admin.TabularInline):
    model = Proposal
    extra = 0
    fields = ['artisan', 'price', 'status', 'responded_at']
    readonly_fields = ['responded_at']
    raw_id_fields = ['artisan']


@admin.register(Emergency)
class EmergencyAdmin(admin.ModelAdmin):
    list_display = ['title', 'trade', 'arrondissement', 'urgency_level', 'status', 'max_budget', 'created_by', 'created_at']
    list_filter = ['status', 'trade', 'urgency_level', 'arrondissement']
    search_fields = ['title', 'description', 'address', 'created_by__email']
    raw_id_fields = ['created_by', 'accepted_proposal']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ProposalInline]


@admin.register(Proposal)
class ProposalAdmin(admin.ModelAdmin):
    list_display = ['emergency', 'artisan_name', 'price', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['artisan_name', 'artisan_company', 'emergency__title']
    raw_id_fields = ['emergency', 'artisan']
    readonly_fields = ['created_at', 'updated_at', 'responded_at']
