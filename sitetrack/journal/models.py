from django.db import models
from django.utils import timezone


class Photo(models.Model):
    """Progress photo; the image itself is hosted elsewhere and referenced by URL"""
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='photos')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    image_url = models.URLField(max_length=500)
    date = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'photos'
        ordering = ['-date', '-id']


class Note(models.Model):
    site = models.ForeignKey('sites.Site', on_delete=models.CASCADE, related_name='notes')
    title = models.CharField(max_length=255)
    content = models.TextField()
    category = models.CharField(max_length=100, blank=True, null=True)
    # Set on create and refreshed by every update
    date = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'notes'
        ordering = ['-date', '-id']
