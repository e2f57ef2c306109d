from rest_framework import serializers
from sitetrack.sites.models import Site
from .models import Photo, Note


class PhotoSerializer(serializers.ModelSerializer):
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())

    class Meta:
        model = Photo
        fields = ['id', 'site_id', 'title', 'description', 'image_url', 'date']
        read_only_fields = ['date']


class NoteSerializer(serializers.ModelSerializer):
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())

    class Meta:
        model = Note
        fields = ['id', 'site_id', 'title', 'content', 'category', 'date']
        read_only_fields = ['date']
