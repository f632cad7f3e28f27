"""
Projects Admin - projects with their timeline and chat.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import ChatMessage, Project, TimelineEntry


class TimelineEntryInline(admin.TabularInline):
    model = TimelineEntry
    extra = 0
    fields = ['timestamp', 'entry_type', 'author', 'message']
    readonly_fields = fields
    can_delete = False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['title', 'gestionnaire', 'artisan', 'price', 'status', 'rating', 'created_at']
    list_filter = ['status', 'rating']
    search_fields = ['title', 'address', 'gestionnaire__email', 'artisan__email']
    raw_id_fields = ['emergency', 'proposal', 'gestionnaire', 'artisan']
    readonly_fields = ['created_at', 'updated_at', 'start_date', 'completed_date', 'rated_at']
    inlines = [TimelineEntryInline]

    fieldsets = (
        (None, {'fields': ('title', 'description', 'address', 'price', 'status')}),
        (_('Parties'), {'fields': ('emergency', 'proposal', 'gestionnaire', 'artisan')}),
        (_('Dates'), {'fields': ('start_date', 'completed_date', 'created_at', 'updated_at')}),
        (_('Photos'), {'fields': ('photos_before', 'photos_during', 'photos_after')}),
        (_('Review'), {'fields': ('rating', 'review', 'rated_at')}),
    )


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ['project', 'sender_name', 'timestamp', 'is_read']
    list_filter = ['is_read']
    search_fields = ['message', 'sender_name', 'project__title']
    raw_id_fields = ['project', 'sender']
