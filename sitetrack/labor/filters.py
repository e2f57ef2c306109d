import django_filters
from django.db.models import Q
from .models import Worker


class WorkerFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    role = django_filters.CharFilter(field_name='role', lookup_expr='iexact')
    ordering = django_filters.OrderingFilter(
        fields=(
            ('name', 'name'),
            ('role', 'role'),
            ('daily_wage', 'daily_wage'),
            ('join_date', 'join_date'),
        )
    )

    class Meta:
        model = Worker
        fields = ['search', 'role']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(role__icontains=value) | Q(phone__icontains=value))
