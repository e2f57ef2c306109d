import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import F
from django.shortcuts import get_object_or_404
from sitetrack.core.utils import create_audit_log
from sitetrack.sites.models import Site
from .filters import MaterialFilter, MaterialTransactionFilter
from .ledger import InvalidTransaction, StockLedger
from .models import Material, MaterialTransaction
from .serializers import MaterialSerializer, MaterialTransactionSerializer, material_names_for
from .stores import DjangoMaterialStore

logger = logging.getLogger('sitetrack.materials')


def _create_material(request, data):
    serializer = MaterialSerializer(data=data)
    if serializer.is_valid():
        material = serializer.save()
        logger.info(f"Material '{material.name}' (id={material.id}) created on site {material.site_id} "
                    f"with {material.quantity} {material.unit}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Material',
            object_id=material.id,
            object_name=material.name,
            site_id=material.site_id,
            changes={'quantity': str(material.quantity), 'min_stock_level': str(material.min_stock_level)}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Material creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def material_create(request):
    """Create a material; site_id is given in the body"""
    return _create_material(request, request.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def site_material_list_create(request, site_id):
    """
    List a site's materials or create one on the site

    Query params: search, category, stock (critical/low/sufficient), ordering
    """
    site = get_object_or_404(Site, pk=site_id)

    if request.method == 'GET':
        queryset = Material.objects.filter(site=site)
        filterset = MaterialFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = MaterialSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        data = request.data.copy()
        data['site_id'] = site.pk
        return _create_material(request, data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_low_stock(request, site_id):
    """Materials on a site whose quantity is below their minimum level"""
    site = get_object_or_404(Site, pk=site_id)
    materials = Material.objects.filter(site=site, quantity__lt=F('min_stock_level')).order_by('name')
    serializer = MaterialSerializer(materials, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def material_detail(request, pk):
    """Retrieve, update or delete a material; deleting keeps its transactions"""
    material = get_object_or_404(Material, pk=pk)

    if request.method == 'GET':
        serializer = MaterialSerializer(material)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        old_quantity = material.quantity
        serializer = MaterialSerializer(material, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            changes = {key: str(value) for key, value in serializer.validated_data.items() if key != 'site'}
            if material.quantity != old_quantity:
                logger.info(f"Material {pk} quantity set directly: {old_quantity} -> {material.quantity}")
                changes['previous_quantity'] = str(old_quantity)
            create_audit_log(
                request=request,
                action='update',
                model_name='Material',
                object_id=material.id,
                object_name=material.name,
                site_id=material.site_id,
                changes=changes
            )
            return Response(serializer.data)
        logger.warning(f"Material {pk} update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        material_name = material.name
        site_id = material.site_id
        logger.info(f"User {request.user.username} deleting material {pk} ({material_name})")
        material.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Material',
            object_id=pk,
            object_name=material_name,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def material_transaction_create(request):
    """
    Record a material transaction and apply it to the material's stock

    Using more than is in stock leaves the material at zero; the transaction
    keeps the requested quantity. A transaction for a deleted material is
    stored without touching any stock.
    """
    serializer = MaterialTransactionSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Material transaction validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    recorded_by = data.get('recorded_by') or request.user.get_username()
    ledger = StockLedger(DjangoMaterialStore())
    try:
        result = ledger.record_transaction(
            material_id=data['material_id'],
            site_id=data['site'].pk,
            transaction_type=data['transaction_type'],
            quantity=data['quantity'],
            notes=data.get('notes', ''),
            recorded_by=recorded_by,
            date=data.get('date'),
        )
    except InvalidTransaction as e:
        logger.warning(f"Material transaction rejected: {e}")
        return Response({'quantity': [str(e)]}, status=status.HTTP_400_BAD_REQUEST)
    txn = result.transaction

    create_audit_log(
        request=request,
        action='stock_transaction',
        model_name='MaterialTransaction',
        object_id=txn.id,
        object_name=result.material_name,
        site_id=txn.site_id,
        changes={
            'material_id': txn.material_id,
            'transaction_type': txn.transaction_type,
            'quantity': str(txn.quantity),
            'previous_quantity': str(result.previous_quantity) if result.material_found else None,
            'new_quantity': str(result.new_quantity) if result.material_found else None,
        }
    )
    if result.clamped:
        create_audit_log(
            request=request,
            action='stock_clamped',
            model_name='Material',
            object_id=txn.material_id,
            object_name=result.material_name,
            site_id=txn.site_id,
            changes={
                'transaction_id': txn.id,
                'requested': str(txn.quantity),
                'available': str(result.previous_quantity),
                'absorbed': str(result.absorbed_quantity),
            }
        )

    return Response(MaterialTransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_transaction_list(request, site_id):
    """
    A site's transactions, newest first

    Query params: material, type (added/used), date_from, date_to
    """
    site = get_object_or_404(Site, pk=site_id)
    queryset = MaterialTransaction.objects.filter(site=site)
    filterset = MaterialTransactionFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    transactions = list(filterset.qs.order_by('-date', '-id'))
    serializer = MaterialTransactionSerializer(
        transactions, many=True, context={'material_names': material_names_for(transactions)}
    )
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def material_transaction_list(request, pk):
    """A material's transactions, newest first; also served after the material is deleted"""
    transactions = list(MaterialTransaction.objects.filter(material_id=pk).order_by('-date', '-id'))
    if not transactions and not Material.objects.filter(pk=pk).exists():
        return Response({'detail': 'Not found.'}, status=status.HTTP_404_NOT_FOUND)
    serializer = MaterialTransactionSerializer(
        transactions, many=True, context={'material_names': material_names_for(transactions)}
    )
    return Response(serializer.data)
