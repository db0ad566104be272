import logging
import platform

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import permissions
from rest_framework.views import APIView
from rest_framework.decorators import api_view, permission_classes

from authentication.permissions import IsAdminOrManager, RolePermissionMixin
from authentication.responses import success_response
from .models import RestaurantSettings
from .serializers import RestaurantSettingsSerializer

logger = logging.getLogger(__name__)


class RestaurantSettingsView(RolePermissionMixin, APIView):
    """
    get: Current restaurant settings (any signed-in user)
    put: Update any subset of the settings (admin/manager)
    """
    read_permission_classes = (permissions.IsAuthenticated,)
    write_permission_classes = (IsAdminOrManager,)

    @extend_schema(summary="Get Restaurant Settings", responses={200: RestaurantSettingsSerializer})
    def get(self, request):
        return success_response(RestaurantSettingsSerializer(RestaurantSettings.load()).data)

    @extend_schema(
        summary="Update Restaurant Settings",
        request=RestaurantSettingsSerializer,
        responses={200: RestaurantSettingsSerializer},
        examples=[
            OpenApiExample('Rename', value={"restaurant_name": "Kigali Bistro", "service_charge": 5}),
            OpenApiExample('Close on Sunday', value={"business_hours": {"sunday": {"closed": True}}}),
        ],
    )
    def put(self, request):
        instance = RestaurantSettings.load()
        serializer = RestaurantSettingsSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if instance.created_by_id is None:
            serializer.save(last_updated_by=request.user, created_by=request.user)
        else:
            serializer.save(last_updated_by=request.user)

        logger.info("Restaurant settings updated by %s", request.user.username)
        return success_response(serializer.data, message='Settings updated successfully')


@extend_schema(summary="System Information", responses={200: {'type': 'object'}})
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def system_info(request):
    return success_response({
        'version': settings.APP_VERSION,
        'environment': settings.ENVIRONMENT,
        'timestamp': timezone.now(),
        'pythonVersion': platform.python_version(),
        'platform': platform.system().lower(),
    })
