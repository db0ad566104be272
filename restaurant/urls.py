from django.urls import path
from . import views

app_name = 'restaurant'

urlpatterns = [
    path('', views.RestaurantSettingsView.as_view(), name='settings'),
    path('system/', views.system_info, name='system-info'),
]
