from django.contrib import admin

from .models import Order, OrderItem, Table


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('unit_price', 'total_price', 'prepared_at', 'served_at')


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ('number', 'capacity', 'location', 'status', 'is_active')
    list_filter = ('location', 'status', 'is_active')
    search_fields = ('number',)
    readonly_fields = ('qr_code', 'created_at', 'updated_at')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'table', 'status', 'payment_status', 'total', 'waiter', 'created_at')
    list_filter = ('status', 'payment_status', 'order_type', 'deduction_status')
    search_fields = ('order_number', 'customer_name', 'customer_phone')
    readonly_fields = ('order_number', 'subtotal', 'total', 'deduction_status', 'deduction_errors', 'created_at')
    inlines = [OrderItemInline]
