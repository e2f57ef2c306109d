from django.contrib import admin
from .models import Photo, Note


@admin.register(Photo)
class PhotoAdmin(admin.ModelAdmin):
    list_display = ['title', 'site', 'date']
    list_filter = ['site', 'date']
    search_fields = ['title', 'description']
    ordering = ['-date']


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ['title', 'site', 'category', 'date']
    list_filter = ['site', 'category', 'date']
    search_fields = ['title', 'content']
    ordering = ['-date']
