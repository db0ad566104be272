from django.contrib import admin

from .models import Category, MenuItem, MenuItemIngredient


class MenuItemIngredientInline(admin.TabularInline):
    model = MenuItemIngredient
    extra = 1


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_active', 'sort_order')
    list_filter = ('is_active',)
    search_fields = ('name',)


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'cost', 'is_available', 'is_active', 'preparation_time')
    list_filter = ('category', 'is_available', 'is_active')
    search_fields = ('name', 'description')
    inlines = [MenuItemIngredientInline]
