"""
Payments Serializers
"""

from rest_framework import serializers

from projects.models import Project

from .models import Invoice, Payment


class InvoiceSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(read_only=True)
    payment_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'project_id', 'payment_id', 'invoice_number',
            'amount', 'tax_amount', 'total_amount',
            'issue_date', 'due_date', 'status', 'pdf_url', 'paid_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(read_only=True)
    project_title = serializers.CharField(source='project.title', read_only=True)
    artisan_id = serializers.UUIDField(read_only=True)
    gestionnaire_id = serializers.UUIDField(read_only=True)
    invoice_id = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            'id', 'project_id', 'project_title', 'artisan_id', 'gestionnaire_id',
            'amount', 'description', 'status', 'invoice_url', 'invoice_id',
            'processed_at', 'failure_reason', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_invoice_id(self, obj):
        invoice = getattr(obj, 'invoice', None)
        return str(invoice.id) if invoice else None


class PaymentRequestSerializer(serializers.Serializer):
    project = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all())
    amount = serializers.IntegerField(min_value=1, required=False)
    description = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class PaymentSummarySerializer(serializers.Serializer):
    total_completed = serializers.IntegerField()
    total_pending = serializers.IntegerField()
    count = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
