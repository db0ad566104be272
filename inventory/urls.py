from django.urls import path

from . import views

urlpatterns = [
    path('', views.InventoryItemListCreateView.as_view(), name='inventory_list_create'),
    path('summary/', views.inventory_summary, name='inventory_summary'),
    path('low-stock/', views.low_stock_items, name='inventory_low_stock'),
    path('expiring/', views.expiring_items, name='inventory_expiring'),
    path('out-of-stock/', views.out_of_stock_items, name='inventory_out_of_stock'),
    path('bulk-stock-update/', views.bulk_stock_update, name='inventory_bulk_stock_update'),
    path('<int:pk>/', views.InventoryItemDetailView.as_view(), name='inventory_detail'),
    path('<int:pk>/stock/', views.update_stock, name='inventory_update_stock'),
]
