from django.urls import path
from . import views

urlpatterns = [
    path('expenses/', views.expense_create, name='expense-create'),
    path('expenses/<int:pk>/', views.expense_detail, name='expense-detail'),
    path('sites/<int:site_id>/expenses/', views.site_expense_list, name='site-expense-list'),
]
