import django_filters
from django.db.models import Q
from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    ordering = django_filters.OrderingFilter(
        fields=(
            ('date', 'date'),
            ('amount', 'amount'),
            ('category', 'category'),
        )
    )

    class Meta:
        model = Expense
        fields = ['search', 'category', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(category__icontains=value) | Q(description__icontains=value))
