from django.contrib import admin

from .models import Invoice, Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['project', 'artisan', 'gestionnaire', 'amount', 'status', 'processed_at', 'created_at']
    list_filter = ['status']
    search_fields = ['project__title', 'artisan__email', 'gestionnaire__email']
    raw_id_fields = ['project', 'artisan', 'gestionnaire']
    readonly_fields = ['created_at', 'updated_at', 'processed_at']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'amount', 'tax_amount', 'total_amount', 'status', 'issue_date', 'due_date']
    list_filter = ['status']
    search_fields = ['invoice_number', 'project__title']
    raw_id_fields = ['project', 'payment']
    readonly_fields = ['invoice_number', 'tax_amount', 'total_amount', 'created_at', 'updated_at', 'paid_at']
