from django.urls import path
from . import views

app_name = 'tables'

urlpatterns = [
    path('', views.TableListCreateView.as_view(), name='table-list'),
    path('available/', views.available_tables, name='table-available'),
    path('summary/', views.tables_summary, name='table-summary'),
    path('<int:pk>/', views.TableDetailView.as_view(), name='table-detail'),
    path('<int:pk>/status/', views.update_table_status, name='table-status'),
    path('<int:pk>/qr/', views.table_qr_code, name='table-qr-code'),
]
