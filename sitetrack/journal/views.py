import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from sitetrack.core.utils import create_audit_log
from sitetrack.sites.models import Site
from .models import Photo, Note
from .serializers import PhotoSerializer, NoteSerializer

logger = logging.getLogger('sitetrack.journal')


# Photo views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_photo_list(request, site_id):
    site = get_object_or_404(Site, pk=site_id)
    photos = Photo.objects.filter(site=site).order_by('-date', '-id')
    serializer = PhotoSerializer(photos, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def photo_create(request):
    serializer = PhotoSerializer(data=request.data)
    if serializer.is_valid():
        photo = serializer.save()
        logger.info(f"Photo '{photo.title}' added to site {photo.site_id}")
        create_audit_log(
            request=request,
            action='create',
            model_name='Photo',
            object_id=photo.id,
            object_name=photo.title,
            site_id=photo.site_id
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def photo_detail(request, pk):
    photo = get_object_or_404(Photo, pk=pk)

    if request.method == 'GET':
        serializer = PhotoSerializer(photo)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PhotoSerializer(photo, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Photo',
                object_id=photo.id,
                object_name=photo.title,
                site_id=photo.site_id
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        site_id = photo.site_id
        title = photo.title
        photo.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Photo',
            object_id=pk,
            object_name=title,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# Note views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def site_note_list(request, site_id):
    """A site's notes, newest first; ?category= and ?search= narrow the list"""
    site = get_object_or_404(Site, pk=site_id)
    notes = Note.objects.filter(site=site)

    category = request.query_params.get('category', None)
    search = request.query_params.get('search', '').strip()
    if category:
        notes = notes.filter(category__iexact=category)
    if search:
        notes = notes.filter(Q(title__icontains=search) | Q(content__icontains=search))

    serializer = NoteSerializer(notes.order_by('-date', '-id'), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def note_create(request):
    serializer = NoteSerializer(data=request.data)
    if serializer.is_valid():
        note = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Note',
            object_id=note.id,
            object_name=note.title,
            site_id=note.site_id
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def note_detail(request, pk):
    """Retrieve, update or delete a note; an update moves the note's date to now"""
    note = get_object_or_404(Note, pk=pk)

    if request.method == 'GET':
        serializer = NoteSerializer(note)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = NoteSerializer(note, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save(date=timezone.now())
            create_audit_log(
                request=request,
                action='update',
                model_name='Note',
                object_id=note.id,
                object_name=note.title,
                site_id=note.site_id
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        site_id = note.site_id
        title = note.title
        note.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Note',
            object_id=pk,
            object_name=title,
            site_id=site_id
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
