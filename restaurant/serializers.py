import re

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from .models import RestaurantSettings, WEEKDAYS

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class DayHoursSerializer(serializers.Serializer):
    open = serializers.RegexField(TIME_PATTERN, required=False, allow_blank=True)
    close = serializers.RegexField(TIME_PATTERN, required=False, allow_blank=True)
    closed = serializers.BooleanField(required=False)


class RestaurantSettingsSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    last_updated_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = RestaurantSettings
        fields = [
            'restaurant_name', 'phone', 'address', 'email',
            'currency', 'timezone', 'tax_rate', 'service_charge',
            'receipt_printer_name', 'receipt_paper_size', 'kitchen_printer_name',
            'auto_print_kitchen', 'print_customer_copy', 'print_kitchen_copy',
            'notify_new_orders', 'notify_order_updates', 'notify_low_stock',
            'notify_expiring_items', 'notify_system_updates', 'notify_security_alerts',
            'business_hours', 'created_by', 'last_updated_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_business_hours(self, value):
        """Merge supplied weekdays over the stored hours."""
        if not isinstance(value, dict):
            raise serializers.ValidationError("Business hours must be an object keyed by weekday")
        unknown = set(value) - set(WEEKDAYS)
        if unknown:
            raise serializers.ValidationError(f"Unknown weekday: {', '.join(sorted(unknown))}")

        hours = dict(self.instance.business_hours) if self.instance else {}
        for day, entry in value.items():
            day_serializer = DayHoursSerializer(data=entry)
            if not day_serializer.is_valid():
                raise serializers.ValidationError({day: day_serializer.errors})
            hours[day] = {**hours.get(day, {}), **day_serializer.validated_data}
        return hours
