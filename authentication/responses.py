from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message=None, status=http_status.HTTP_200_OK):
    """Successful API envelope: ``{success: true, message?, data?}``."""
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return Response(body, status=status)


class EnvelopeMixin:
    """
    Wraps the stock generic-view retrieve/update/destroy responses in the API
    envelope. ``object_key`` names the entity inside ``data``.
    """
    object_key = 'item'
    created_message = None
    updated_message = None
    deleted_message = None

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance)
        return success_response({self.object_key: serializer.data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success_response(
            {self.object_key: self.get_read_serializer(serializer.instance).data},
            message=self.created_message,
            status=http_status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        if getattr(instance, '_prefetched_objects_cache', None):
            # Drop prefetched relations the update may have changed
            instance._prefetched_objects_cache = {}

        return success_response(
            {self.object_key: self.get_read_serializer(serializer.instance).data},
            message=self.updated_message,
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return success_response(message=self.deleted_message)

    def get_read_serializer(self, instance):
        read_class = getattr(self, 'read_serializer_class', None) or self.get_serializer_class()
        return read_class(instance, context=self.get_serializer_context())
