import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Avg, Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal, ROUND_HALF_UP

from sitetrack.core.cache_utils import get_or_build_dashboard
from sitetrack.core.utils import parse_date_param
from sitetrack.expenses.models import Expense
from sitetrack.labor.models import Attendance, Worker
from sitetrack.materials.ledger import STOCK_CRITICAL, STOCK_SUFFICIENT, classify_stock
from sitetrack.materials.models import Material, MaterialTransaction
from sitetrack.materials.serializers import MaterialTransactionSerializer, material_names_for
from sitetrack.sites.models import Site

logger = logging.getLogger('sitetrack.reports')

HELPER_ROLE = 'helper'
LABOR_CATEGORY = 'labor'


def _date_range(request):
    """Optional inclusive date_from/date_to; malformed values raise a 400"""
    date_from = parse_date_param(request.query_params.get('date_from'), 'date_from')
    date_to = parse_date_param(request.query_params.get('date_to'), 'date_to')
    return date_from, date_to


def _range_filter(field, date_from, date_to):
    q = Q()
    if date_from:
        q &= Q(**{f'{field}__gte': date_from})
    if date_to:
        q &= Q(**{f'{field}__lte': date_to})
    return q


def _range_payload(date_from, date_to):
    return {
        'from': date_from.isoformat() if date_from else None,
        'to': date_to.isoformat() if date_to else None,
    }


def build_dashboard(site):
    """Headline numbers for a site's dashboard"""
    materials = list(Material.objects.filter(site=site))
    statuses = [classify_stock(m.quantity, m.min_stock_level) for m in materials]

    workers = Worker.objects.filter(site=site)
    workers_count = workers.count()
    helper_workers = workers.filter(role__iexact=HELPER_ROLE).count()

    today_expense_total = Expense.objects.filter(site=site, date=timezone.localdate()).aggregate(
        total=Sum('amount')
    )['total'] or Decimal('0')

    recent = list(MaterialTransaction.objects.filter(site=site).order_by('-date', '-id')[:5])
    recent_data = MaterialTransactionSerializer(
        recent, many=True, context={'material_names': material_names_for(recent)}
    ).data

    return {
        'site_id': site.id,
        'site_name': site.name,
        'materials_count': len(materials),
        'low_stock_count': sum(1 for s in statuses if s != STOCK_SUFFICIENT),
        'critical_stock_count': sum(1 for s in statuses if s == STOCK_CRITICAL),
        'workers_count': workers_count,
        'skilled_workers': workers_count - helper_workers,
        'helper_workers': helper_workers,
        'today_expense_total': today_expense_total,
        'recent_transactions': [dict(item) for item in recent_data],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_dashboard(request, site_id):
    """Dashboard summary for a site (cached until the site's data changes)"""
    site = get_object_or_404(Site, pk=site_id)
    data = get_or_build_dashboard(site.id, lambda: build_dashboard(site))
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def materials_report(request, site_id):
    """Per-material stock with the quantities added and used in the date range"""
    site = get_object_or_404(Site, pk=site_id)
    date_from, date_to = _date_range(request)

    txn_range = _range_filter('transactions__date__date', date_from, date_to)
    materials = Material.objects.filter(site=site).annotate(
        added=Sum('transactions__quantity', filter=txn_range & Q(transactions__transaction_type='added')),
        used=Sum('transactions__quantity', filter=txn_range & Q(transactions__transaction_type='used')),
    ).order_by('name')

    rows = []
    for material in materials:
        rows.append({
            'id': material.id,
            'name': material.name,
            'category': material.category,
            'unit': material.unit,
            'current_stock': material.quantity,
            'min_stock_level': material.min_stock_level,
            'added': material.added or Decimal('0'),
            'used': material.used or Decimal('0'),
            'stock_status': classify_stock(material.quantity, material.min_stock_level),
        })

    return Response({
        'site_id': site.id,
        'period': _range_payload(date_from, date_to),
        'materials': rows,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def labor_report(request, site_id):
    """Labor cost, workforce composition and attendance totals for a site"""
    site = get_object_or_404(Site, pk=site_id)
    date_from, date_to = _date_range(request)

    total_labor_cost = Expense.objects.filter(
        _range_filter('date', date_from, date_to), site=site, category__iexact=LABOR_CATEGORY
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0')

    workers = Worker.objects.filter(site=site)
    wage_stats = workers.aggregate(count=Count('id'), average=Avg('daily_wage'))
    average_wage = wage_stats['average']
    if average_wage is None:
        average_wage = Decimal('0')
    average_wage = Decimal(str(average_wage)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    by_role = {}
    for row in workers.values('role').annotate(count=Count('id'), total_wage=Sum('daily_wage')).order_by('role'):
        by_role[row['role']] = {'count': row['count'], 'total_wage': row['total_wage']}

    attendance = Attendance.objects.filter(_range_filter('date', date_from, date_to), site=site).aggregate(
        present_days=Count('id', filter=Q(present=True)),
        absent_days=Count('id', filter=Q(present=False)),
        hours_worked=Sum('hours_worked'),
    )

    return Response({
        'site_id': site.id,
        'period': _range_payload(date_from, date_to),
        'total_labor_cost': total_labor_cost,
        'workers_count': wage_stats['count'],
        'average_daily_wage': average_wage,
        'by_role': by_role,
        'attendance': {
            'present_days': attendance['present_days'],
            'absent_days': attendance['absent_days'],
            'hours_worked': attendance['hours_worked'] or Decimal('0'),
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expenses_report(request, site_id):
    """Expense totals for a site, split by category and by day"""
    site = get_object_or_404(Site, pk=site_id)
    date_from, date_to = _date_range(request)

    expenses = Expense.objects.filter(_range_filter('date', date_from, date_to), site=site)
    total = expenses.aggregate(total=Sum('amount'))['total'] or Decimal('0')

    by_category = []
    for row in expenses.values('category').annotate(total_amount=Sum('amount')).order_by('-total_amount', 'category'):
        if total > 0:
            percentage = float((row['total_amount'] / total * 100).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))
        else:
            percentage = 0.0
        by_category.append({'category': row['category'], 'amount': row['total_amount'], 'percentage': percentage})

    by_date = [
        {'date': row['date'].isoformat(), 'amount': row['total_amount']}
        for row in expenses.values('date').annotate(total_amount=Sum('amount')).order_by('date')
    ]

    logger.debug(f"Expense report for site {site.id}: total={total}, categories={len(by_category)}")

    return Response({
        'site_id': site.id,
        'period': _range_payload(date_from, date_to),
        'total_expenses': total,
        'by_category': by_category,
        'by_date': by_date,
    })
