"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing API URL Configuration
-------------------------------------------------------------------------
"""
from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    # Ledger
    path('', views.BillListCreateView.as_view(), name='bill_list'),
    path('<int:pk>/', views.BillDetailView.as_view(), name='bill_detail'),
    path('<int:pk>/receipt/', views.BillReceiptView.as_view(), name='bill_receipt'),
    path('<int:pk>/update/', views.BillUpdateView.as_view(), name='bill_update'),
    path('<int:pk>/void/', views.BillVoidView.as_view(), name='bill_void'),
    path('<int:pk>/delete/', views.BillDeleteView.as_view(), name='bill_delete'),
    
    # Lookups
    path('receipt/<int:receipt_no>/', views.BillByReceiptView.as_view(), name='bill_by_receipt'),
    path('member/<int:ward>/<int:house>/', views.MemberBillsView.as_view(), name='member_bills'),
    
    # Reports
    path('stats/', views.BillStatsView.as_view(), name='bill_stats'),
    path('export/', views.BillExportView.as_view(), name='bill_export'),
]
