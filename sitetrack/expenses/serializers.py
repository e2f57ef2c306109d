from rest_framework import serializers
from sitetrack.sites.models import Site
from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())

    class Meta:
        model = Expense
        fields = ['id', 'site_id', 'category', 'amount', 'date', 'description', 'has_receipt',
                  'receipt_url', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
