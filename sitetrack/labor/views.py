import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from sitetrack.core.utils import create_audit_log, parse_date_param
from sitetrack.sites.models import Site
from .filters import WorkerFilter
from .models import Worker, Attendance
from .serializers import WorkerSerializer, AttendanceSerializer

logger = logging.getLogger('sitetrack.labor')


# Worker views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_worker_list(request, site_id):
    """
    List a site's workers

    Query params: search, role, ordering (name, role, daily_wage, join_date)
    """
    site = get_object_or_404(Site, pk=site_id)
    filterset = WorkerFilter(request.query_params, queryset=Worker.objects.filter(site=site))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = WorkerSerializer(filterset.qs, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def worker_create(request):
    serializer = WorkerSerializer(data=request.data)
    if serializer.is_valid():
        worker = serializer.save()
        logger.info(f"Worker '{worker.name}' ({worker.role}) added to site {worker.site_id}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Worker',
            object_id=worker.id,
            object_name=worker.name,
            site_id=worker.site_id,
            changes={'role': worker.role, 'daily_wage': str(worker.daily_wage)}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Worker creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def worker_detail(request, pk):
    """Retrieve, update or delete a worker; deleting removes the worker's attendance"""
    worker = get_object_or_404(Worker, pk=pk)

    if request.method == 'GET':
        serializer = WorkerSerializer(worker)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WorkerSerializer(worker, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Worker',
                object_id=worker.id,
                object_name=worker.name,
                site_id=worker.site_id,
                changes={key: str(value) for key, value in serializer.validated_data.items() if key != 'site'}
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        worker_name = worker.name
        site_id = worker.site_id
        worker.delete()
        logger.info(f"Worker {pk} ({worker_name}) deleted by {request.user.username}")
        create_audit_log(
            request=request,
            action='delete',
            model_name='Worker',
            object_id=pk,
            object_name=worker_name,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# Attendance views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_attendance_list(request, site_id):
    """Attendance for a site on one day (?date=YYYY-MM-DD, default today)"""
    site = get_object_or_404(Site, pk=site_id)
    day = parse_date_param(request.query_params.get('date'), 'date') or timezone.localdate()
    records = Attendance.objects.filter(site=site, date=day).select_related('worker').order_by('worker__name')
    serializer = AttendanceSerializer(records, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_attendance_list(request, pk):
    """A worker's attendance history, newest first"""
    worker = get_object_or_404(Worker, pk=pk)
    records = Attendance.objects.filter(worker=worker).select_related('worker').order_by('-date', '-id')
    serializer = AttendanceSerializer(records, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attendance_create(request):
    """Record attendance; site_id defaults to the worker's site"""
    serializer = AttendanceSerializer(data=request.data)
    if serializer.is_valid():
        record = serializer.save()
        logger.info(f"Attendance for worker {record.worker_id} on {record.date}: "
                    f"{'present' if record.present else 'absent'}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Attendance',
            object_id=record.id,
            object_name=record.worker.name,
            site_id=record.site_id,
            changes={'date': record.date.isoformat(), 'present': record.present}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def attendance_detail(request, pk):
    record = get_object_or_404(Attendance.objects.select_related('worker'), pk=pk)

    if request.method == 'GET':
        serializer = AttendanceSerializer(record)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AttendanceSerializer(record, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Attendance',
                object_id=record.id,
                object_name=record.worker.name,
                site_id=record.site_id,
                changes={key: str(value) for key, value in serializer.validated_data.items()
                         if key not in ('site', 'worker')}
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        site_id = record.site_id
        worker_name = record.worker.name
        record.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Attendance',
            object_id=pk,
            object_name=worker_name,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
