import logging

import django_filters
from django.db.models import Prefetch, ProtectedError
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import generics, filters, permissions
from rest_framework.decorators import api_view, permission_classes, authentication_classes

from authentication.exceptions import BusinessRuleError, get_or_404
from authentication.permissions import IsAdminOrManager, RolePermissionMixin
from authentication.responses import EnvelopeMixin, success_response
from .models import Category, MenuItem
from .serializers import (
    CategorySerializer, CategoryBriefSerializer, MenuItemSerializer, CustomerMenuItemSerializer,
)

logger = logging.getLogger(__name__)


def flag_param(request, name, default=None):
    value = request.query_params.get(name)
    if value is None:
        return default
    return value.strip().lower() == 'true'


# =============== CATEGORY VIEWS ===============

class CategoryListCreateView(RolePermissionMixin, EnvelopeMixin, generics.ListCreateAPIView):
    """
    get: Active categories, or every category with ``includeInactive=true``
    post: Create a category (admin/manager)
    """
    serializer_class = CategorySerializer
    pagination_class = None
    object_key = 'category'
    created_message = 'Category created successfully'

    def get_queryset(self):
        queryset = Category.objects.select_related('created_by')
        if not flag_param(self.request, 'includeInactive', False):
            queryset = queryset.filter(is_active=True)
        return queryset.order_by('sort_order', 'name')

    @extend_schema(
        summary="List Categories",
        parameters=[OpenApiParameter('includeInactive', bool, description='Include inactive categories')],
    )
    def get(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response({'categories': serializer.data})

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class CategoryDetailView(RolePermissionMixin, EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Category details
    put/patch: Update a category (admin/manager)
    delete: Delete a category that no menu item references (admin/manager)
    """
    queryset = Category.objects.select_related('created_by')
    serializer_class = CategorySerializer
    object_key = 'category'
    updated_message = 'Category updated successfully'
    deleted_message = 'Category deleted successfully'

    def get_object(self):
        category = get_or_404(self.get_queryset(), 'Category not found', pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, category)
        return category

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        if MenuItem.objects.filter(category=instance).exists():
            raise BusinessRuleError('Cannot delete category with existing menu items')
        logger.info("Category %s deleted by %s", instance.name, self.request.user.username)
        instance.delete()


# =============== MENU ITEM VIEWS ===============

class MenuItemFilter(django_filters.FilterSet):
    category = django_filters.NumberFilter(field_name='category_id')
    isAvailable = django_filters.BooleanFilter(field_name='is_available')

    class Meta:
        model = MenuItem
        fields = ['category', 'isAvailable']


class MenuItemListCreateView(RolePermissionMixin, EnvelopeMixin, generics.ListCreateAPIView):
    """
    get: List menu items (page/limit, category, search, isAvailable, isActive defaults to true)
    post: Create a menu item with its ingredient list (admin/manager)
    """
    serializer_class = MenuItemSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = MenuItemFilter
    search_fields = ['name', 'description', 'tags']
    results_key = 'menuItems'
    object_key = 'menuItem'
    created_message = 'Menu item created successfully'

    def get_queryset(self):
        queryset = MenuItem.objects.select_related('category', 'created_by').prefetch_related(
            'ingredients__inventory_item'
        )
        is_active = flag_param(self.request, 'isActive', True)
        return queryset.filter(is_active=is_active).order_by('sort_order', 'name')

    @extend_schema(
        summary="List Menu Items",
        parameters=[
            OpenApiParameter('category', int, description='Category id'),
            OpenApiParameter('isAvailable', bool),
            OpenApiParameter('isActive', bool, description='Defaults to true'),
            OpenApiParameter('search', str, description='Search name, description and tags'),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def perform_create(self, serializer):
        item = serializer.save(created_by=self.request.user)
        logger.info("Menu item %s created by %s", item.name, self.request.user.username)


class MenuItemDetailView(RolePermissionMixin, EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Menu item with its ingredients and their stock
    put/patch: Update a menu item; a supplied ingredient list replaces the old one (admin/manager)
    delete: Delete a menu item that no order references (admin/manager)
    """
    queryset = MenuItem.objects.select_related('category', 'created_by').prefetch_related(
        'ingredients__inventory_item'
    )
    serializer_class = MenuItemSerializer
    object_key = 'menuItem'
    updated_message = 'Menu item updated successfully'
    deleted_message = 'Menu item deleted successfully'

    def get_object(self):
        menu_item = get_or_404(self.get_queryset(), 'Menu item not found', pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, menu_item)
        return menu_item

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise BusinessRuleError(
                'Cannot delete a menu item that appears on existing orders; deactivate it instead'
            )


@extend_schema(summary="Toggle Menu Item Availability", request=None, responses={200: MenuItemSerializer})
@api_view(['PATCH'])
@permission_classes([IsAdminOrManager])
def toggle_availability(request, pk):
    menu_item = get_or_404(MenuItem, 'Menu item not found', pk=pk)
    menu_item.is_available = not menu_item.is_available
    menu_item.save(update_fields=['is_available', 'updated_at'])

    state = 'enabled' if menu_item.is_available else 'disabled'
    return success_response(
        {'menuItem': MenuItemSerializer(menu_item).data},
        message=f'Menu item {state} successfully',
    )


# =============== PUBLIC MENU ===============

@extend_schema(
    summary="Customer Menu",
    description="Public menu of active categories and their orderable items. "
                "A table scan code in ``table`` ties the browsing session to a table.",
    parameters=[OpenApiParameter('table', str, description='Table scan code from the QR link')],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([permissions.AllowAny])
def customer_menu(request):
    from orders.models import Table

    data = {}
    scan_code = request.query_params.get('table')
    if scan_code:
        table = get_or_404(Table.objects.filter(is_active=True), 'Table not found', qr_code=scan_code)
        data['table'] = {'id': table.pk, 'number': table.number, 'location': table.location}

    categories = Category.objects.active().prefetch_related(
        Prefetch('items', queryset=MenuItem.objects.orderable().order_by('sort_order', 'name'), to_attr='orderable_items')
    )

    data['menu'] = [
        {
            'category': CategoryBriefSerializer(category).data,
            'items': CustomerMenuItemSerializer(category.orderable_items, many=True).data,
        }
        for category in categories
        if category.orderable_items
    ]
    return success_response(data)
