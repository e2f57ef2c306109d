from django.urls import path
from . import views

urlpatterns = [
    path('sites/', views.site_list_create, name='site-list-create'),
    path('sites/<int:pk>/', views.site_detail, name='site-detail'),
]
