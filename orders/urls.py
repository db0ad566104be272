from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    path('', views.OrderListCreateView.as_view(), name='order-list'),
    path('active/', views.active_orders, name='order-active'),
    path('today/', views.today_orders, name='order-today'),
    path('statistics/', views.order_statistics, name='order-statistics'),
    path('daybook/', views.export_daybook, name='order-daybook'),
    path('<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('<int:pk>/status/', views.update_order_status, name='order-status'),
    path('<int:pk>/items/<int:item_id>/status/', views.update_order_item_status, name='order-item-status'),
    path('<int:pk>/payment/', views.process_payment, name='order-payment'),
]
