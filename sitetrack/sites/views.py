import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from sitetrack.core.utils import create_audit_log
from .models import Site
from .serializers import SiteSerializer

logger = logging.getLogger('sitetrack.sites')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def site_list_create(request):
    """List all sites or create a new site"""
    if request.method == 'GET':
        sites = Site.objects.all()
        status_filter = request.query_params.get('status', None)
        if status_filter:
            sites = sites.filter(status=status_filter)
        serializer = SiteSerializer(sites, many=True)
        return Response(serializer.data)
    else:
        serializer = SiteSerializer(data=request.data)
        if serializer.is_valid():
            site = serializer.save()
            logger.info(f"Site '{site.name}' (id={site.id}) created by {request.user.username}")
            create_audit_log(
                request=request,
                action='create',
                model_name='Site',
                object_id=site.id,
                object_name=site.name,
                site_id=site.id,
                changes={'name': site.name, 'location': site.location, 'status': site.status}
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        logger.warning(f"Site creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def site_detail(request, pk):
    """Retrieve, update or delete a site; deleting a site removes everything recorded for it"""
    site = get_object_or_404(Site, pk=pk)

    if request.method == 'GET':
        serializer = SiteSerializer(site)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SiteSerializer(site, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Site',
                object_id=site.id,
                object_name=site.name,
                site_id=site.id,
                changes=dict(request.data)
            )
            return Response(serializer.data)
        logger.warning(f"Site {pk} update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        site_name = site.name
        logger.info(f"User {request.user.username} deleting site {pk} ({site_name})")
        site.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Site',
            object_id=pk,
            object_name=site_name,
            site_id=pk
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
