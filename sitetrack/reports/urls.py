from django.urls import path
from . import views

urlpatterns = [
    path('sites/<int:site_id>/dashboard/', views.site_dashboard, name='site-dashboard'),
    path('sites/<int:site_id>/reports/materials/', views.materials_report, name='materials-report'),
    path('sites/<int:site_id>/reports/labor/', views.labor_report, name='labor-report'),
    path('sites/<int:site_id>/reports/expenses/', views.expenses_report, name='expenses-report'),
]
