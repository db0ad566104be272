from decimal import Decimal

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from .models import InventoryItem
from .stock import OPERATIONS


class InventoryItemSerializer(serializers.ModelSerializer):
    stock_status = serializers.ReadOnlyField()
    stock_value = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    days_until_expiry = serializers.ReadOnlyField()
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'name', 'description', 'sku', 'category', 'unit',
            'current_stock', 'minimum_stock', 'maximum_stock', 'unit_cost',
            'supplier_name', 'supplier_contact', 'supplier_email',
            'expiry_date', 'location', 'is_active', 'last_restocked',
            'stock_status', 'stock_value', 'days_until_expiry',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['last_restocked', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'validators': []},
            'sku': {'validators': [], 'required': False},
        }

    def validate_name(self, value):
        """Inventory item names are unique"""
        value = value.strip()
        queryset = InventoryItem.objects.filter(name=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("name already exists")
        return value

    def validate_sku(self, value):
        value = value.strip().upper()
        if not value:
            return value
        queryset = InventoryItem.objects.filter(sku=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("sku already exists")
        return value

    def validate_supplier_email(self, value):
        return value.lower()


class StockUpdateSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3,
        error_messages={'required': 'Valid quantity is required', 'invalid': 'Valid quantity is required'},
    )
    operation = serializers.ChoiceField(
        choices=OPERATIONS,
        error_messages={
            'required': 'Invalid operation. Use add, subtract, or set',
            'invalid_choice': 'Invalid operation. Use add, subtract, or set',
        },
    )
    reason = serializers.CharField(required=False, allow_blank=True, max_length=200)

    def validate_quantity(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Valid quantity is required')
        return value


class BulkStockEntrySerializer(StockUpdateSerializer):
    id = serializers.IntegerField(
        error_messages={'required': 'Inventory item id is required', 'invalid': 'Inventory item id must be an integer'},
    )


class BulkStockUpdateSerializer(serializers.Serializer):
    updates = serializers.ListField(
        child=serializers.DictField(),
        allow_empty=False,
        error_messages={'required': 'Updates array is required', 'empty': 'Updates array is required'},
    )
