import logging
from collections import OrderedDict
from decimal import Decimal

import django_filters
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter
from rest_framework import generics, filters
from rest_framework.decorators import api_view, permission_classes

from authentication.exceptions import get_or_404
from authentication.permissions import CanManageInventory, IsAdminOrManager, RolePermissionMixin
from authentication.responses import EnvelopeMixin, success_response
from .models import InventoryItem
from .serializers import (
    InventoryItemSerializer, StockUpdateSerializer, BulkStockEntrySerializer, BulkStockUpdateSerializer,
)
from .stock import adjust_stock, bulk_adjust_stock

logger = logging.getLogger(__name__)

ALERT_LIMIT = 5


class InventoryItemFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(choices=InventoryItem.CATEGORY_CHOICES)
    isActive = django_filters.BooleanFilter(field_name='is_active')
    stockStatus = django_filters.ChoiceFilter(
        choices=InventoryItem.STOCK_STATUS_CHOICES, method='filter_stock_status'
    )

    class Meta:
        model = InventoryItem
        fields = ['category', 'isActive', 'stockStatus']

    def filter_stock_status(self, queryset, name, value):
        return queryset.with_stock_status(value)


class InventoryItemListCreateView(EnvelopeMixin, generics.ListCreateAPIView):
    """
    get: List inventory items (page/limit, category, search, stockStatus, isActive)
    post: Create an inventory item; an initial stock stamps the restock time
    """
    queryset = InventoryItem.objects.select_related('created_by').order_by('name')
    serializer_class = InventoryItemSerializer
    permission_classes = [CanManageInventory]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = InventoryItemFilter
    search_fields = ['name', 'description', 'sku']
    results_key = 'inventoryItems'
    object_key = 'inventoryItem'
    created_message = 'Inventory item created successfully'

    def perform_create(self, serializer):
        initial_stock = serializer.validated_data.get('current_stock') or Decimal('0')
        item = serializer.save(created_by=self.request.user)
        if initial_stock > 0:
            item.last_restocked = item.created_at
            item.save(update_fields=['last_restocked'])
        logger.info("Inventory item %s created by %s", item.name, self.request.user.username)


class InventoryItemDetailView(RolePermissionMixin, EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Inventory item details
    put/patch: Update an inventory item
    delete: Delete an inventory item (admin/manager)
    """
    queryset = InventoryItem.objects.select_related('created_by')
    serializer_class = InventoryItemSerializer
    read_permission_classes = (CanManageInventory,)
    write_permission_classes = (CanManageInventory,)
    delete_permission_classes = (IsAdminOrManager,)
    object_key = 'inventoryItem'
    updated_message = 'Inventory item updated successfully'
    deleted_message = 'Inventory item deleted successfully'

    def get_object(self):
        item = get_or_404(self.get_queryset(), 'Inventory item not found', pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, item)
        return item

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)


@extend_schema(
    summary="Update Stock Level",
    description="Apply an add, subtract or set operation to an item's stock. Stock never drops below zero.",
    request=StockUpdateSerializer,
    examples=[
        OpenApiExample('Restock', value={"quantity": 20, "operation": "add", "reason": "Weekly delivery"}),
    ],
)
@api_view(['PATCH'])
@permission_classes([CanManageInventory])
def update_stock(request, pk):
    serializer = StockUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    item, old_stock, new_stock = adjust_stock(pk, data['quantity'], data['operation'], data.get('reason'))

    return success_response({
        'inventoryItem': InventoryItemSerializer(item).data,
        'oldStock': old_stock,
        'newStock': new_stock,
        'change': new_stock - old_stock,
    }, message='Stock updated successfully')


@extend_schema(
    summary="Bulk Stock Update",
    description="Apply several stock operations; each entry succeeds or fails on its own.",
    request=BulkStockUpdateSerializer,
    examples=[
        OpenApiExample('Bulk', value={"updates": [
            {"id": 1, "quantity": 5, "operation": "add", "reason": "Delivery"},
            {"id": 2, "quantity": 2, "operation": "subtract", "reason": "Spoiled"},
        ]}),
    ],
)
@api_view(['POST'])
@permission_classes([CanManageInventory])
def bulk_stock_update(request):
    serializer = BulkStockUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = bulk_adjust_stock(serializer.validated_data['updates'], BulkStockEntrySerializer)
    return success_response(result, message='Bulk stock update completed')


@extend_schema(summary="Low Stock Items", responses={200: InventoryItemSerializer(many=True)})
@api_view(['GET'])
@permission_classes([CanManageInventory])
def low_stock_items(request):
    items = InventoryItem.objects.low_stock()
    return success_response({
        'lowStockItems': InventoryItemSerializer(items, many=True).data,
        'count': len(items),
    })


@extend_schema(summary="Out Of Stock Items", responses={200: InventoryItemSerializer(many=True)})
@api_view(['GET'])
@permission_classes([CanManageInventory])
def out_of_stock_items(request):
    items = InventoryItem.objects.out_of_stock()
    return success_response({
        'outOfStockItems': InventoryItemSerializer(items, many=True).data,
        'count': len(items),
    })


def days_param(request, default=7):
    try:
        return int(request.query_params.get('days', default))
    except (TypeError, ValueError):
        return default


@extend_schema(
    summary="Expiring Items",
    parameters=[OpenApiParameter('days', int, description='Look-ahead window in days (default 7)')],
    responses={200: InventoryItemSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([CanManageInventory])
def expiring_items(request):
    days = days_param(request)
    items = InventoryItem.objects.expiring(days)
    return success_response({
        'expiringItems': InventoryItemSerializer(items, many=True).data,
        'count': len(items),
        'daysFilter': days,
    })


@extend_schema(summary="Inventory Summary", responses={200: {'type': 'object'}})
@api_view(['GET'])
@permission_classes([CanManageInventory])
def inventory_summary(request):
    active = InventoryItem.objects.active()
    low_stock = list(InventoryItem.objects.low_stock())
    out_of_stock = list(InventoryItem.objects.out_of_stock())
    expiring = list(InventoryItem.objects.expiring(7))

    value_expr = ExpressionWrapper(
        F('current_stock') * F('unit_cost'),
        output_field=DecimalField(max_digits=20, decimal_places=5),
    )
    total_value = active.aggregate(total=Sum(value_expr))['total'] or Decimal('0')

    category_breakdown = [
        OrderedDict([
            ('category', row['category']),
            ('count', row['count']),
            ('totalValue', (row['total_value'] or Decimal('0')).quantize(Decimal('0.01'))),
        ])
        for row in active.values('category')
        .annotate(count=Count('id'), total_value=Sum(value_expr))
        .order_by('-count', 'category')
    ]

    return success_response({
        'summary': {
            'totalItems': active.count(),
            'lowStockCount': len(low_stock),
            'outOfStockCount': len(out_of_stock),
            'expiringCount': len(expiring),
            'totalValue': Decimal(total_value).quantize(Decimal('0.01')),
        },
        'categoryBreakdown': category_breakdown,
        'alerts': {
            'lowStock': InventoryItemSerializer(low_stock[:ALERT_LIMIT], many=True).data,
            'outOfStock': InventoryItemSerializer(out_of_stock[:ALERT_LIMIT], many=True).data,
            'expiring': InventoryItemSerializer(expiring[:ALERT_LIMIT], many=True).data,
        },
    })
