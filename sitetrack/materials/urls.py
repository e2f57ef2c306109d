from django.urls import path
from . import views

urlpatterns = [
    path('materials/', views.material_create, name='material-create'),
    path('materials/<int:pk>/', views.material_detail, name='material-detail'),
    path('materials/<int:pk>/transactions/', views.material_transaction_list, name='material-transaction-list'),
    path('sites/<int:site_id>/materials/', views.site_material_list_create, name='site-material-list-create'),
    path('sites/<int:site_id>/materials/low-stock/', views.site_low_stock, name='site-low-stock'),
    path('sites/<int:site_id>/material-transactions/', views.site_transaction_list, name='site-transaction-list'),
    path('material-transactions/', views.material_transaction_create, name='material-transaction-create'),
    path('transactions/', views.material_transaction_create, name='transaction-create'),
]
