from django.urls import path
from . import views

urlpatterns = [
    path('photos/', views.photo_create, name='photo-create'),
    path('photos/<int:pk>/', views.photo_detail, name='photo-detail'),
    path('sites/<int:site_id>/photos/', views.site_photo_list, name='site-photo-list'),
    path('notes/', views.note_create, name='note-create'),
    path('notes/<int:pk>/', views.note_detail, name='note-detail'),
    path('sites/<int:site_id>/notes/', views.site_note_list, name='site-note-list'),
]
