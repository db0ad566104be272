import logging

import django_filters
from django_filters.rest_framework import DjangoFilterBackend
from django.conf import settings
from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter
from rest_framework import generics, status, permissions, filters
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .emails import send_welcome_email
from .exceptions import BusinessRuleError, get_or_404
from .models import User
from .permissions import IsAdmin, IsAdminOrManager, RolePermissionMixin, navigation_for
from .responses import EnvelopeMixin, success_response
from .serializers import (
    UserSerializer, UserSummarySerializer, LoginSerializer, RegisterSerializer,
    UserCreateSerializer, UserUpdateSerializer, ProfileSerializer,
    ChangePasswordSerializer, LogoutSerializer,
)

logger = logging.getLogger(__name__)


def issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    # Custom claims
    refresh['username'] = user.username
    refresh['role'] = user.role
    return {
        'token': str(refresh.access_token),
        'refreshToken': str(refresh),
    }


# =============== AUTHENTICATION VIEWS ===============

class LoginView(APIView):
    """
    Username/password login. The username field also accepts the account email.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        # Failed logins answer 401 even though the view runs no authenticator
        return 'Bearer realm="api"'

    @extend_schema(
        summary="User Login with JWT Token",
        description="Authenticate with username (or email) and password. Inactive accounts cannot log in.",
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'success': {'type': 'boolean'},
                    'message': {'type': 'string'},
                    'data': {
                        'type': 'object',
                        'properties': {
                            'user': {'type': 'object'},
                            'token': {'type': 'string', 'description': 'JWT access token'},
                            'refreshToken': {'type': 'string', 'description': 'JWT refresh token'},
                            'navigation': {'type': 'array', 'items': {'type': 'object'}},
                        },
                    },
                },
            },
            401: {'description': 'Invalid credentials'},
        },
        examples=[
            OpenApiExample(
                'Waiter Login',
                value={"username": "waiter1", "password": "secret123"},
            ),
        ],
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']

        user.last_login_at = timezone.now()
        user.save(update_fields=['last_login_at'])
        logger.info("User %s logged in", user.username)

        return success_response({
            'user': UserSerializer(user).data,
            **issue_tokens(user),
            'navigation': navigation_for(user.role),
        }, message='Login successful')


@extend_schema(
    summary="Register Staff Account",
    description="Create an account. New accounts default to the waiter role; only an admin may register another admin.",
    request=RegisterSerializer,
    responses={201: {'description': 'User registered'}, 400: {'description': 'Validation errors'}},
    examples=[
        OpenApiExample(
            'Register Waiter',
            value={
                "username": "waiter2",
                "email": "waiter2@restaurant.com",
                "password": "secret123",
                "first_name": "Jane",
                "last_name": "Doe",
            },
        ),
    ],
)
@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    created_by = request.user if request.user.is_authenticated else None
    user = serializer.save(created_by=created_by)

    return success_response({
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    }, message='User registered successfully', status=status.HTTP_201_CREATED)


class ProfileView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Get My Profile", responses={200: UserSerializer})
    def get(self, request):
        return success_response({
            'user': UserSerializer(request.user).data,
            'navigation': navigation_for(request.user.role),
        })

    @extend_schema(summary="Update My Profile", request=ProfileSerializer, responses={200: UserSerializer})
    def put(self, request):
        serializer = ProfileSerializer(request.user, data=request.data, partial=True, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response({'user': UserSerializer(user).data}, message='Profile updated successfully')


@extend_schema(summary="Change Password", request=ChangePasswordSerializer)
@api_view(['PUT'])
@permission_classes([permissions.IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    user = request.user
    user.set_password(serializer.validated_data['newPassword'])
    user.save(update_fields=['password', 'updated_at'])
    logger.info("User %s changed their password", user.username)
    return success_response(message='Password changed successfully')


@extend_schema(summary="Logout", request=LogoutSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def logout(request):
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    refresh = serializer.validated_data.get('refreshToken')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as exc:
            logger.info("Logout with unusable refresh token for %s: %s", request.user.username, exc)
    return success_response(message='Logout successful')


# =============== USER MANAGEMENT VIEWS ===============

class UserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(choices=User.ROLES)
    isActive = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = User
        fields = ['role', 'isActive']


class UserListCreateView(generics.ListCreateAPIView):
    """
    List staff accounts or create one. Created accounts get a generated
    password when none is supplied, and a welcome email with the credentials.
    """
    queryset = User.objects.select_related('created_by').order_by('-created_at')
    permission_classes = [IsAdminOrManager]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = UserFilter
    search_fields = ['username', 'first_name', 'last_name', 'email']
    results_key = 'users'

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    @extend_schema(
        summary="List Users",
        parameters=[
            OpenApiParameter('role', str, description='Filter by role'),
            OpenApiParameter('isActive', bool, description='Filter by active flag'),
            OpenApiParameter('search', str, description='Search username, names and email'),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(summary="Create User", request=UserCreateSerializer, responses={201: UserSerializer})
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save(created_by=request.user)
        logger.info("User %s created by %s with role %s", user.username, request.user.username, user.role)

        send_welcome_email(user, serializer.plain_password)

        return success_response(
            {'user': UserSerializer(user).data},
            message='User created successfully',
            status=status.HTTP_201_CREATED,
        )


class UserDetailView(RolePermissionMixin, EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = User.objects.select_related('created_by')
    read_permission_classes = (IsAdminOrManager,)
    write_permission_classes = (IsAdminOrManager,)
    delete_permission_classes = (IsAdmin,)
    read_serializer_class = UserSerializer
    object_key = 'user'
    updated_message = 'User updated successfully'
    deleted_message = 'User deleted successfully'

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return UserUpdateSerializer
        return UserSerializer

    def get_object(self):
        user = get_or_404(self.get_queryset(), 'User not found', pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, user)
        return user

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise BusinessRuleError('Cannot delete your own account')
        logger.info("User %s deleted by %s", instance.username, self.request.user.username)
        instance.delete()


@extend_schema(summary="List Active Users By Role", responses={200: UserSummarySerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAdminOrManager])
def users_by_role(request, role):
    if role not in dict(User.ROLES):
        raise BusinessRuleError('Invalid role')
    users = User.objects.by_role(role).order_by('first_name')
    return success_response({'users': UserSummarySerializer(users, many=True).data})


@extend_schema(summary="Toggle User Active Status", request=None, responses={200: UserSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminOrManager])
def toggle_user_status(request, pk):
    user = get_or_404(User, 'User not found', pk=pk)

    if user.role == User.ROLE_ADMIN and not request.user.is_admin:
        return Response({
            'success': False,
            'message': 'Only admin can change admin user status',
        }, status=status.HTTP_403_FORBIDDEN)

    if user.pk == request.user.pk:
        raise BusinessRuleError('Cannot change your own account status')

    user.is_active = not user.is_active
    user.save(update_fields=['is_active', 'updated_at'])

    state = 'activated' if user.is_active else 'deactivated'
    logger.info("User %s %s by %s", user.username, state, request.user.username)
    return success_response({'user': UserSerializer(user).data}, message=f'User {state} successfully')


# =============== SYSTEM ===============

@extend_schema(summary="Health Check", responses={200: {'type': 'object'}, 503: {'type': 'object'}})
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
@throttle_classes([])
def health_check(request):
    try:
        # Test database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return Response({
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected',
            'version': settings.APP_VERSION,
        })
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
            'error': str(e),
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
