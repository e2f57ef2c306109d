import django_filters
from decimal import Decimal
from django.db.models import F, Q
from .ledger import CRITICAL_RATIO, STOCK_CRITICAL, STOCK_LOW, STOCK_SUFFICIENT, TRANSACTION_TYPES
from .models import Material, MaterialTransaction


class MaterialFilter(django_filters.FilterSet):
    """Search, category and stock-status filtering for a site's materials"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    stock = django_filters.ChoiceFilter(
        method='filter_stock',
        label='Stock status',
        choices=[(STOCK_CRITICAL, 'Critical'), (STOCK_LOW, 'Low'), (STOCK_SUFFICIENT, 'Sufficient')],
    )
    ordering = django_filters.OrderingFilter(
        fields=(
            ('name', 'name'),
            ('category', 'category'),
            ('quantity', 'quantity'),
            ('min_stock_level', 'min_stock_level'),
            ('last_updated', 'last_updated'),
        )
    )

    class Meta:
        model = Material
        fields = ['search', 'category', 'stock']

    def filter_search(self, queryset, name, value):
        """Match the search term against name or category"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(category__icontains=value))

    def filter_stock(self, queryset, name, value):
        critical_level = F('min_stock_level') * Decimal(CRITICAL_RATIO)
        if value == STOCK_SUFFICIENT:
            return queryset.filter(quantity__gte=F('min_stock_level'))
        if value == STOCK_CRITICAL:
            return queryset.filter(quantity__lt=critical_level)
        if value == STOCK_LOW:
            return queryset.filter(quantity__lt=F('min_stock_level'), quantity__gte=critical_level)
        return queryset


class MaterialTransactionFilter(django_filters.FilterSet):
    material = django_filters.NumberFilter(field_name='material_id', lookup_expr='exact')
    type = django_filters.ChoiceFilter(
        field_name='transaction_type',
        choices=[(t, t.title()) for t in TRANSACTION_TYPES],
    )
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='date__lte')

    class Meta:
        model = MaterialTransaction
        fields = ['material', 'type', 'date_from', 'date_to']
