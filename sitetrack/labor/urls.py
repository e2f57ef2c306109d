from django.urls import path
from . import views

urlpatterns = [
    path('workers/', views.worker_create, name='worker-create'),
    path('workers/<int:pk>/', views.worker_detail, name='worker-detail'),
    path('workers/<int:pk>/attendance/', views.worker_attendance_list, name='worker-attendance-list'),
    path('sites/<int:site_id>/workers/', views.site_worker_list, name='site-worker-list'),
    path('sites/<int:site_id>/attendance/', views.site_attendance_list, name='site-attendance-list'),
    path('attendance/', views.attendance_create, name='attendance-create'),
    path('attendance/<int:pk>/', views.attendance_detail, name='attendance-detail'),
]
