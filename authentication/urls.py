from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
    # =============== AUTHENTICATION ===============
    path('login/', views.LoginView.as_view(), name='login'),
    path('register/', views.register, name='register'),
    path('refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('logout/', views.logout, name='logout'),

    # =============== USER PROFILE ===============
    path('profile/', views.ProfileView.as_view(), name='my_profile'),
    path('change-password/', views.change_password, name='change_password'),
]
