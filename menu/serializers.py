from django.db import transaction
from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from inventory.models import InventoryItem
from .models import Category, MenuItem, MenuItemIngredient


class CategorySerializer(serializers.ModelSerializer):
    items_count = serializers.SerializerMethodField()
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'description', 'is_active', 'sort_order',
            'items_count', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'name': {'validators': []}}

    def get_items_count(self, obj):
        return obj.items.filter(is_active=True).count()

    def validate_name(self, value):
        """Category names are unique"""
        value = value.strip()
        queryset = Category.objects.filter(name__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("Category with this name already exists")
        return value


class CategoryBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name']


class MenuItemIngredientSerializer(serializers.ModelSerializer):
    item = serializers.PrimaryKeyRelatedField(
        source='inventory_item', queryset=InventoryItem.objects.all()
    )
    item_name = serializers.CharField(source='inventory_item.name', read_only=True, default=None)
    current_stock = serializers.DecimalField(
        source='inventory_item.current_stock', max_digits=12, decimal_places=3, read_only=True, default=None
    )

    class Meta:
        model = MenuItemIngredient
        fields = ['id', 'item', 'item_name', 'quantity', 'unit', 'current_stock']
        read_only_fields = ['id']


class NutritionalInfoSerializer(serializers.Serializer):
    calories = serializers.FloatField(required=False, min_value=0)
    protein = serializers.FloatField(required=False, min_value=0)
    carbs = serializers.FloatField(required=False, min_value=0)
    fat = serializers.FloatField(required=False, min_value=0)
    fiber = serializers.FloatField(required=False, min_value=0)


class MenuItemSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    category_detail = CategoryBriefSerializer(source='category', read_only=True)
    ingredients = MenuItemIngredientSerializer(many=True, required=False)
    nutritional_info = NutritionalInfoSerializer(required=False)
    allergens = serializers.ListField(
        child=serializers.ChoiceField(choices=MenuItem.ALLERGEN_CHOICES), required=False
    )
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50, trim_whitespace=True), required=False
    )
    profit_margin = serializers.DecimalField(max_digits=8, decimal_places=2, read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'category', 'category_detail', 'price', 'cost',
            'profit_margin', 'image', 'is_available', 'is_active', 'preparation_time',
            'ingredients', 'nutritional_info', 'allergens', 'tags', 'sort_order',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_preparation_time(self, value):
        if value < 1:
            raise serializers.ValidationError("Preparation time must be at least 1 minute")
        return value

    def validate_allergens(self, value):
        # Keep first occurrence order, drop duplicates
        return list(dict.fromkeys(value))

    @transaction.atomic
    def create(self, validated_data):
        ingredients_data = validated_data.pop('ingredients', [])
        menu_item = MenuItem.objects.create(**validated_data)
        self._write_ingredients(menu_item, ingredients_data)
        return menu_item

    @transaction.atomic
    def update(self, instance, validated_data):
        ingredients_data = validated_data.pop('ingredients', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        # A supplied ingredient list replaces the current one
        if ingredients_data is not None:
            instance.ingredients.all().delete()
            self._write_ingredients(instance, ingredients_data)

        return instance

    def _write_ingredients(self, menu_item, ingredients_data):
        MenuItemIngredient.objects.bulk_create([
            MenuItemIngredient(menu_item=menu_item, position=position, **data)
            for position, data in enumerate(ingredients_data)
        ])


class CustomerMenuItemSerializer(serializers.ModelSerializer):
    """Public view of a menu item: no cost, margin or recipe."""

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'price', 'image', 'preparation_time',
            'nutritional_info', 'allergens', 'tags',
        ]
