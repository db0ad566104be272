import logging
from datetime import timedelta

import django_filters
from django.db.models import Count, ProtectedError, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes

from authentication.exceptions import BusinessRuleError, get_or_404
from authentication.permissions import (
    CanHandlePayments, CanManageOrders, IsAdminOrManager, RolePermissionMixin,
)
from authentication.responses import EnvelopeMixin, success_response
from menu.views import flag_param
from restaurant.models import RestaurantSettings
from . import lifecycle
from .models import Order, Table, to_money
from .qr import qr_data_url, table_menu_url
from .reports import daybook_response
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderStatusSerializer, OrderItemStatusSerializer,
    PaymentSerializer, TableSerializer, TableStatusSerializer,
)

logger = logging.getLogger(__name__)


def order_queryset():
    return Order.objects.select_related('table', 'waiter', 'cashier', 'created_by').prefetch_related(
        'items__menu_item'
    )


def order_payload(order_id):
    return OrderSerializer(order_queryset().get(pk=order_id)).data


# =============== ORDER VIEWS ===============

class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    paymentStatus = django_filters.ChoiceFilter(field_name='payment_status', choices=Order.PAYMENT_STATUS_CHOICES)
    table = django_filters.NumberFilter(field_name='table_id')
    waiter = django_filters.NumberFilter(field_name='waiter_id')
    startDate = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    endDate = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['status', 'paymentStatus', 'table', 'waiter', 'startDate', 'endDate']


class OrderListCreateView(EnvelopeMixin, generics.ListCreateAPIView):
    """List orders or place a new one"""
    serializer_class = OrderSerializer
    permission_classes = [CanManageOrders]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter
    results_key = 'orders'
    object_key = 'order'

    def get_queryset(self):
        return order_queryset().order_by('-created_at')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
            openapi.Parameter('paymentStatus', openapi.IN_QUERY, description="Filter by payment status", type=openapi.TYPE_STRING),
            openapi.Parameter('table', openapi.IN_QUERY, description="Filter by table id", type=openapi.TYPE_INTEGER),
            openapi.Parameter('waiter', openapi.IN_QUERY, description="Filter by waiter id", type=openapi.TYPE_INTEGER),
            openapi.Parameter('startDate', openapi.IN_QUERY, description="From date (YYYY-MM-DD)", type=openapi.TYPE_STRING),
            openapi.Parameter('endDate', openapi.IN_QUERY, description="To date (YYYY-MM-DD)", type=openapi.TYPE_STRING),
            openapi.Parameter('page', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Create a new order with items",
        request_body=OrderCreateSerializer,
        responses={201: OrderSerializer, 400: 'Bad Request', 404: 'Table or menu item not found'}
    )
    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = lifecycle.create_order(
            request.user,
            table_id=data['tableId'],
            items=data['items'],
            order_type=data['orderType'],
            customer=data.get('customer'),
            notes=data.get('notes', ''),
            discount=data.get('discount', 0),
        )
        return success_response(
            {'order': order_payload(order.pk)},
            message='Order created successfully',
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(EnvelopeMixin, generics.RetrieveAPIView):
    """Retrieve an order with its items"""
    serializer_class = OrderSerializer
    permission_classes = [CanManageOrders]
    object_key = 'order'

    def get_queryset(self):
        return order_queryset()

    def get_object(self):
        return get_or_404(self.get_queryset(), 'Order not found', pk=self.kwargs['pk'])


@swagger_auto_schema(
    method='get',
    operation_description="Orders still being worked on, oldest first",
    responses={200: OrderSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([CanManageOrders])
def active_orders(request):
    orders = order_queryset().active()
    return success_response({'orders': OrderSerializer(orders, many=True).data, 'count': len(orders)})


@swagger_auto_schema(
    method='get',
    operation_description="Orders placed today",
    responses={200: OrderSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([CanManageOrders])
def today_orders(request):
    orders = order_queryset().today().order_by('-created_at')
    return success_response({'orders': OrderSerializer(orders, many=True).data, 'count': len(orders)})


@swagger_auto_schema(
    method='get',
    operation_description="Get order statistics for dashboard",
    responses={
        200: openapi.Response(
            description="Order statistics",
            schema=openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'todayOrders': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'activeOrders': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'paidOrders': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'cancelledOrders': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'todayRevenue': openapi.Schema(type=openapi.TYPE_NUMBER),
                    'averageOrderValue': openapi.Schema(type=openapi.TYPE_NUMBER),
                    'statusBreakdown': openapi.Schema(type=openapi.TYPE_OBJECT),
                }
            )
        )
    }
)
@api_view(['GET'])
@permission_classes([CanManageOrders])
def order_statistics(request):
    today = Order.objects.today()
    paid_today = today.filter(payment_status=Order.PAYMENT_PAID)
    revenue = paid_today.aggregate(total=Sum('total'))['total'] or 0
    paid_count = paid_today.count()

    breakdown = {
        row['status']: row['count']
        for row in today.order_by().values('status').annotate(count=Count('id'))
    }

    return success_response({
        'todayOrders': today.count(),
        'activeOrders': Order.objects.active().count(),
        'paidOrders': paid_count,
        'cancelledOrders': breakdown.get(Order.CANCELLED, 0),
        'todayRevenue': to_money(revenue),
        'averageOrderValue': to_money(revenue / paid_count) if paid_count else to_money(0),
        'statusBreakdown': breakdown,
    })


def date_param(request, name, default):
    value = request.query_params.get(name)
    if not value:
        return default
    try:
        parsed = parse_date(value)
    except ValueError:
        # Well formed but impossible, such as 2024-02-30
        parsed = None
    if parsed is None:
        raise BusinessRuleError(f'Invalid {name}, expected YYYY-MM-DD')
    return parsed


@swagger_auto_schema(
    method='get',
    operation_description="Download the orders of a date range as an Excel daybook",
    manual_parameters=[
        openapi.Parameter('startDate', openapi.IN_QUERY, description="From date (YYYY-MM-DD), defaults to today", type=openapi.TYPE_STRING),
        openapi.Parameter('endDate', openapi.IN_QUERY, description="To date (YYYY-MM-DD), defaults to startDate", type=openapi.TYPE_STRING),
    ],
    responses={200: 'Excel workbook', 400: 'Bad Request'}
)
@api_view(['GET'])
@permission_classes([IsAdminOrManager])
def export_daybook(request):
    start_date = date_param(request, 'startDate', timezone.localdate())
    end_date = date_param(request, 'endDate', start_date)
    if end_date < start_date:
        raise BusinessRuleError('endDate must not be before startDate')
    if end_date - start_date > timedelta(days=366):
        raise BusinessRuleError('Daybook range cannot exceed one year')

    orders = order_queryset().filter(
        created_at__date__gte=start_date, created_at__date__lte=end_date
    ).order_by('created_at')

    logger.info("Daybook %s..%s exported by %s", start_date, end_date, request.user.username)
    return daybook_response(orders, start_date, end_date, RestaurantSettings.load().restaurant_name)


@swagger_auto_schema(
    method='patch',
    operation_description="Move an order to its next status; cancelling requires a reason",
    request_body=OrderStatusSerializer,
    responses={200: OrderSerializer, 400: 'Invalid status transition', 404: 'Order not found'}
)
@api_view(['PATCH'])
@permission_classes([CanManageOrders])
def update_order_status(request, pk):
    serializer = OrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    order = lifecycle.transition(pk, data['status'], request.user, data.get('cancellationReason'))
    return success_response(
        {'order': order_payload(order.pk)},
        message='Order status updated successfully',
    )


@swagger_auto_schema(
    method='patch',
    operation_description="Update one line item's kitchen status",
    request_body=OrderItemStatusSerializer,
    responses={200: OrderSerializer, 404: 'Order or item not found'}
)
@api_view(['PATCH'])
@permission_classes([CanManageOrders])
def update_order_item_status(request, pk, item_id):
    serializer = OrderItemStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = lifecycle.update_item_status(pk, item_id, serializer.validated_data['status'], request.user)
    return success_response(
        {'order': order_payload(order.pk)},
        message='Order item status updated successfully',
    )


@swagger_auto_schema(
    method='post',
    operation_description="Settle an order in full and return the change due",
    request_body=PaymentSerializer,
    responses={200: OrderSerializer, 400: 'Bad Request', 404: 'Order not found'}
)
@api_view(['POST'])
@permission_classes([CanHandlePayments])
def process_payment(request, pk):
    serializer = PaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    order, change = lifecycle.process_payment(pk, data['paymentMethod'], data['amountPaid'], request.user)
    return success_response(
        {'order': order_payload(order.pk), 'change': change},
        message='Payment processed successfully',
    )


# =============== TABLE VIEWS ===============

class TableListCreateView(RolePermissionMixin, EnvelopeMixin, generics.ListCreateAPIView):
    """
    get: Tables (isActive defaults to true; filter by location and status)
    post: Create a table; its scan code is assigned automatically (admin/manager)
    """
    serializer_class = TableSerializer
    pagination_class = None
    read_permission_classes = (CanManageOrders,)
    write_permission_classes = (IsAdminOrManager,)
    object_key = 'table'
    created_message = 'Table created successfully'

    def get_queryset(self):
        queryset = Table.objects.select_related('created_by').filter(
            is_active=flag_param(self.request, 'isActive', True)
        )
        location = self.request.query_params.get('location')
        if location:
            queryset = queryset.filter(location=location)
        table_status = self.request.query_params.get('status')
        if table_status:
            queryset = queryset.filter(status=table_status)
        return queryset.order_by('number')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('isActive', openapi.IN_QUERY, description="Defaults to true", type=openapi.TYPE_BOOLEAN),
            openapi.Parameter('location', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ]
    )
    def get(self, request, *args, **kwargs):
        tables = self.get_queryset()
        return success_response({'tables': TableSerializer(tables, many=True).data})

    def perform_create(self, serializer):
        table = serializer.save(created_by=self.request.user)
        logger.info("Table %s created by %s", table.number, self.request.user.username)


class TableDetailView(RolePermissionMixin, EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Table details
    put/patch: Update a table (admin/manager)
    delete: Delete a table that no order references (admin/manager)
    """
    queryset = Table.objects.select_related('created_by')
    serializer_class = TableSerializer
    read_permission_classes = (CanManageOrders,)
    write_permission_classes = (IsAdminOrManager,)
    object_key = 'table'
    updated_message = 'Table updated successfully'
    deleted_message = 'Table deleted successfully'

    def get_object(self):
        table = get_or_404(self.get_queryset(), 'Table not found', pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, table)
        return table

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise BusinessRuleError('Cannot delete a table with existing orders; deactivate it instead')
        logger.info("Table %s deleted by %s", instance.number, self.request.user.username)


@swagger_auto_schema(
    method='get',
    operation_description="Active tables that are free, optionally in one location",
    manual_parameters=[openapi.Parameter('location', openapi.IN_QUERY, type=openapi.TYPE_STRING)],
    responses={200: TableSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([CanManageOrders])
def available_tables(request):
    tables = Table.objects.available(request.query_params.get('location'))
    return success_response({'tables': TableSerializer(tables, many=True).data, 'count': len(tables)})


@swagger_auto_schema(method='get', operation_description="Table counts by status and by location")
@api_view(['GET'])
@permission_classes([IsAdminOrManager])
def tables_summary(request):
    tables = Table.objects.active()

    status_breakdown = {value: 0 for value, _ in Table.STATUS_CHOICES}
    for row in tables.order_by().values('status').annotate(count=Count('id')):
        status_breakdown[row['status']] = row['count']

    location_breakdown = {}
    for table in tables:
        entry = location_breakdown.setdefault(table.location, {'count': 0, 'available': 0, 'occupied': 0})
        entry['count'] += 1
        if table.status == Table.STATUS_AVAILABLE:
            entry['available'] += 1
        elif table.status == Table.STATUS_OCCUPIED:
            entry['occupied'] += 1

    return success_response({
        'totalTables': tables.count(),
        'statusBreakdown': status_breakdown,
        'locationBreakdown': location_breakdown,
    })


@swagger_auto_schema(
    method='patch',
    operation_description="Set a table's status",
    request_body=TableStatusSerializer,
    responses={200: TableSerializer, 404: 'Table not found'}
)
@api_view(['PATCH'])
@permission_classes([CanManageOrders])
def update_table_status(request, pk):
    serializer = TableStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    table = get_or_404(Table, 'Table not found', pk=pk)
    table.set_status(serializer.validated_data['status'])
    logger.info("Table %s marked %s by %s", table.number, table.status, request.user.username)
    return success_response({'table': TableSerializer(table).data}, message='Table status updated successfully')


@swagger_auto_schema(
    method='get',
    operation_description="QR code (PNG data URL) linking to the customer menu for this table",
    responses={200: 'QR code', 404: 'Table not found'}
)
@api_view(['GET'])
@permission_classes([CanManageOrders])
def table_qr_code(request, pk):
    table = get_or_404(Table, 'Table not found', pk=pk)
    url = table_menu_url(table, request)
    return success_response({
        'table': {
            'id': table.pk,
            'number': table.number,
            'qrCode': table.qr_code,
            'qrCodeUrl': url,
        },
        'qrCodeDataUrl': qr_data_url(url),
    })
