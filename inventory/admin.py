from django.contrib import admin

from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'sku', 'category', 'unit', 'current_stock', 'minimum_stock', 'unit_cost', 'is_active')
    list_filter = ('category', 'is_active')
    search_fields = ('name', 'sku', 'description')
    readonly_fields = ('last_restocked', 'created_at', 'updated_at')
