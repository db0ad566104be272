import secrets
import string

from django.db.models import Q
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied

from .models import User


def generate_password(length=10):
    """Random password for accounts created without one."""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


class UserSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'full_name', 'email', 'phone']

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip()


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField(read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'phone', 'role', 'is_active', 'created_by', 'last_login_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip()


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(help_text='Username or email address')
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        identifier = attrs['username'].strip()
        user = User.objects.filter(
            Q(username=identifier) | Q(email=identifier.lower()),
            is_active=True,
        ).first()

        if user is None or not user.check_password(attrs['password']):
            raise AuthenticationFailed('Invalid credentials')

        attrs['user'] = user
        return attrs


class AdminRoleGuardMixin:
    """Only an authenticated admin may hand out the admin role."""

    def validate_role(self, value):
        if value == User.ROLE_ADMIN:
            request = self.context.get('request')
            user = getattr(request, 'user', None)
            if not user or not user.is_authenticated or not user.is_admin:
                raise PermissionDenied('Only admin can create admin users')
        return value


class UserCreateSerializer(AdminRoleGuardMixin, serializers.ModelSerializer):
    """
    Staff account creation.  ``password`` is optional here; a random one is
    generated when omitted and exposed afterwards as ``plain_password`` so the
    caller can mail it out.
    """
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'password', 'first_name', 'last_name', 'phone', 'role']
        extra_kwargs = {
            'username': {'validators': []},
            'email': {'validators': []},
            'first_name': {'required': True, 'allow_blank': False},
            'last_name': {'required': True, 'allow_blank': False},
        }

    def validate(self, attrs):
        email = attrs['email'].lower()
        if User.objects.filter(Q(email=email) | Q(username=attrs['username'])).exists():
            raise serializers.ValidationError('User with this email or username already exists')
        attrs['email'] = email
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password', None) or generate_password()
        validated_data.setdefault('role', User.ROLE_WAITER)
        user = User.objects.create_user(password=password, **validated_data)
        self.plain_password = password
        return user


class RegisterSerializer(UserCreateSerializer):
    password = serializers.CharField(write_only=True, min_length=6)


class UserUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['username', 'email', 'first_name', 'last_name', 'phone', 'role', 'is_active']
        extra_kwargs = {
            'username': {'validators': []},
            'email': {'validators': []},
        }

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('Email is already taken')
        return value

    def validate_username(self, value):
        if User.objects.filter(username=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('Username is already taken')
        return value

    def validate(self, attrs):
        request = self.context['request']
        touches_admin = self.instance.role == User.ROLE_ADMIN or attrs.get('role') == User.ROLE_ADMIN
        if touches_admin and not request.user.is_admin:
            raise PermissionDenied('Only admin can update admin users or assign admin role')
        return attrs


class ProfileSerializer(UserUpdateSerializer):
    class Meta(UserUpdateSerializer.Meta):
        fields = ['first_name', 'last_name', 'phone', 'email']

    def validate(self, attrs):
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(write_only=True, trim_whitespace=False)
    newPassword = serializers.CharField(write_only=True, min_length=6, trim_whitespace=False)

    def validate_currentPassword(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect')
        return value


class LogoutSerializer(serializers.Serializer):
    refreshToken = serializers.CharField(required=False, allow_blank=True)
