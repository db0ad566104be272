from django.urls import path

from . import views

urlpatterns = [
    # Public
    path('customer/', views.customer_menu, name='customer_menu'),

    # Categories
    path('categories/', views.CategoryListCreateView.as_view(), name='category_list_create'),
    path('categories/<int:pk>/', views.CategoryDetailView.as_view(), name='category_detail'),

    # Menu items
    path('items/', views.MenuItemListCreateView.as_view(), name='menu_item_list_create'),
    path('items/<int:pk>/', views.MenuItemDetailView.as_view(), name='menu_item_detail'),
    path('items/<int:pk>/toggle-availability/', views.toggle_availability, name='menu_item_toggle_availability'),
]
