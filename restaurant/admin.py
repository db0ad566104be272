from django.contrib import admin

from .models import RestaurantSettings


@admin.register(RestaurantSettings)
class RestaurantSettingsAdmin(admin.ModelAdmin):
    list_display = ('restaurant_name', 'currency', 'timezone', 'tax_rate', 'service_charge', 'updated_at')
    readonly_fields = ('created_by', 'last_updated_by', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        return not RestaurantSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
