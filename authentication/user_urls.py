from django.urls import path

from . import views

urlpatterns = [
    path('', views.UserListCreateView.as_view(), name='user_list_create'),
    path('role/<str:role>/', views.users_by_role, name='users_by_role'),
    path('<int:pk>/', views.UserDetailView.as_view(), name='user_detail'),
    path('<int:pk>/toggle-status/', views.toggle_user_status, name='toggle_user_status'),
]
