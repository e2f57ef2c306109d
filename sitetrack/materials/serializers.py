from decimal import Decimal
from rest_framework import serializers
from sitetrack.sites.models import Site
from .ledger import TRANSACTION_TYPES, classify_stock, stock_percentage
from .models import Material, MaterialTransaction


class MaterialSerializer(serializers.ModelSerializer):
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())
    stock_status = serializers.SerializerMethodField()
    stock_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Material
        fields = ['id', 'site_id', 'name', 'category', 'unit', 'quantity', 'min_stock_level',
                  'stock_status', 'stock_percentage', 'last_updated', 'created_at']
        read_only_fields = ['last_updated', 'created_at']

    def get_stock_status(self, obj):
        return classify_stock(obj.quantity, obj.min_stock_level)

    def get_stock_percentage(self, obj):
        return stock_percentage(obj.quantity, obj.min_stock_level)


class MaterialTransactionSerializer(serializers.ModelSerializer):
    """Transactions are written through StockLedger; this serializer validates input and renders records"""
    # Plain integer: the material may have been deleted since the transaction was recorded
    material_id = serializers.IntegerField(min_value=1)
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())
    transaction_type = serializers.ChoiceField(choices=TRANSACTION_TYPES)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal('0.001'))
    date = serializers.DateTimeField(required=False)
    material_name = serializers.SerializerMethodField()

    class Meta:
        model = MaterialTransaction
        fields = ['id', 'material_id', 'material_name', 'site_id', 'date', 'transaction_type',
                  'quantity', 'notes', 'recorded_by', 'created_at']
        read_only_fields = ['created_at']

    def get_material_name(self, obj):
        names = self.context.get('material_names')
        if names is not None:
            return names.get(obj.material_id)
        material = Material.objects.filter(pk=obj.material_id).only('name').first()
        return material.name if material else None

    def validate(self, attrs):
        site = attrs.get('site')
        material_id = attrs.get('material_id')
        if site is not None and material_id is not None:
            material_site_id = Material.objects.filter(pk=material_id).values_list('site_id', flat=True).first()
            if material_site_id is not None and material_site_id != site.pk:
                raise serializers.ValidationError(
                    {'site_id': [f"Material {material_id} does not belong to site {site.pk}."]}
                )
        return attrs


def material_names_for(transactions):
    """Map material_id -> name for a batch of transactions (deleted materials are absent)"""
    ids = {t.material_id for t in transactions}
    return dict(Material.objects.filter(pk__in=ids).values_list('id', 'name'))
