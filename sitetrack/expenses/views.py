import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from sitetrack.core.utils import create_audit_log
from sitetrack.sites.models import Site
from .filters import ExpenseFilter
from .models import Expense
from .serializers import ExpenseSerializer

logger = logging.getLogger('sitetrack.expenses')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_expense_list(request, site_id):
    """
    List a site's expenses, newest first

    Query params: search, category, date_from, date_to, ordering (date, amount, category)
    """
    site = get_object_or_404(Site, pk=site_id)
    filterset = ExpenseFilter(request.query_params, queryset=Expense.objects.filter(site=site))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = ExpenseSerializer(filterset.qs, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def expense_create(request):
    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        expense = serializer.save()
        logger.info(f"Expense {expense.id} ({expense.category} {expense.amount}) recorded on site {expense.site_id}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Expense',
            object_id=expense.id,
            object_name=expense.category,
            site_id=expense.site_id,
            changes={'amount': str(expense.amount), 'date': expense.date.isoformat()}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Expense creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    expense = get_object_or_404(Expense, pk=pk)

    if request.method == 'GET':
        serializer = ExpenseSerializer(expense)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Expense',
                object_id=expense.id,
                object_name=expense.category,
                site_id=expense.site_id,
                changes={key: str(value) for key, value in serializer.validated_data.items() if key != 'site'}
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        site_id = expense.site_id
        category = expense.category
        expense.delete()
        logger.info(f"Expense {pk} deleted by {request.user.username}")
        create_audit_log(
            request=request,
            action='delete',
            model_name='Expense',
            object_id=pk,
            object_name=category,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
