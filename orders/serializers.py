from decimal import Decimal

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from .models import Order, OrderItem, Table


# =============== TABLE SERIALIZERS ===============

class TableSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Table
        fields = [
            'id', 'number', 'capacity', 'location', 'status', 'qr_code', 'is_active',
            'notes', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['qr_code', 'created_at', 'updated_at']
        extra_kwargs = {'number': {'validators': []}}

    def validate_number(self, value):
        value = value.strip()
        queryset = Table.objects.filter(number__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("Table number already exists")
        return value

    def validate_capacity(self, value):
        if value < 1:
            raise serializers.ValidationError("Capacity must be at least 1")
        return value


class TableBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Table
        fields = ['id', 'number', 'location', 'capacity']


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Table.STATUS_CHOICES)


# =============== ORDER READ SERIALIZERS ===============

class OrderItemSerializer(serializers.ModelSerializer):
    menu_item = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            'id', 'menu_item', 'quantity', 'unit_price', 'total_price',
            'special_instructions', 'status', 'prepared_at', 'served_at',
        ]

    def get_menu_item(self, obj):
        return {
            'id': obj.menu_item_id,
            'name': obj.menu_item.name,
            'price': obj.menu_item.price,
            'preparation_time': obj.menu_item.preparation_time,
        }


class OrderSerializer(serializers.ModelSerializer):
    table = TableBriefSerializer(read_only=True)
    customer = serializers.SerializerMethodField()
    items = OrderItemSerializer(many=True, read_only=True)
    waiter = UserSummarySerializer(read_only=True)
    cashier = UserSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    order_duration = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'table', 'customer', 'items',
            'subtotal', 'tax', 'discount', 'total',
            'status', 'order_type', 'payment_status', 'payment_method',
            'waiter', 'cashier', 'created_by', 'notes',
            'estimated_prep_time', 'actual_prep_time', 'order_duration',
            'confirmed_at', 'ready_at', 'served_at', 'paid_at', 'cancelled_at',
            'cancellation_reason', 'deduction_status', 'deduction_errors',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        return {
            'name': obj.customer_name,
            'phone': obj.customer_phone,
            'email': obj.customer_email,
        }


# =============== ORDER WRITE SERIALIZERS ===============

class OrderLineInputSerializer(serializers.Serializer):
    menuItemId = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    specialInstructions = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')


class CustomerInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')


class OrderCreateSerializer(serializers.Serializer):
    tableId = serializers.IntegerField()
    items = OrderLineInputSerializer(many=True, allow_empty=False)
    orderType = serializers.ChoiceField(choices=Order.ORDER_TYPE_CHOICES, default=Order.DINE_IN)
    customer = CustomerInputSerializer(required=False)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, default=Decimal('0')
    )

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("Order must contain at least one item")
        return value


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    cancellationReason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class OrderItemStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderItem.STATUS_CHOICES)


class PaymentSerializer(serializers.Serializer):
    paymentMethod = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES)
    amountPaid = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
