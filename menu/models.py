from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import TimeStampedModel
from inventory.models import InventoryItem


class CategoryQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True).order_by('sort_order', 'name')


class Category(TimeStampedModel):
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='menu_categories'
    )

    objects = CategoryQuerySet.as_manager()

    class Meta:
        db_table = 'menu_categories'
        ordering = ['sort_order', 'name']
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name


class MenuItemQuerySet(models.QuerySet):

    def orderable(self):
        """Items a customer can order right now."""
        return self.filter(is_available=True, is_active=True)


class MenuItem(TimeStampedModel):
    ALLERGEN_CHOICES = [
        ('gluten', 'Gluten'),
        ('dairy', 'Dairy'),
        ('nuts', 'Nuts'),
        ('eggs', 'Eggs'),
        ('soy', 'Soy'),
        ('shellfish', 'Shellfish'),
        ('fish', 'Fish'),
    ]

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='items')
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(Decimal('0'))]
    )
    image = models.CharField(max_length=500, blank=True)
    is_available = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    preparation_time = models.PositiveIntegerField(default=15, validators=[MinValueValidator(1)])
    nutritional_info = models.JSONField(default=dict, blank=True)
    allergens = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    sort_order = models.IntegerField(default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='menu_items'
    )

    objects = MenuItemQuerySet.as_manager()

    class Meta:
        db_table = 'menu_items'
        ordering = ['sort_order', 'name']
        indexes = [
            models.Index(fields=['is_available', 'is_active'], name='menu_items_is_avai_0c6e2b_idx'),
            models.Index(fields=['price'], name='menu_items_price_7d3f10_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def profit_margin(self):
        if self.cost and self.cost > 0 and self.price:
            margin = (Decimal(self.price) - Decimal(self.cost)) / Decimal(self.price) * 100
            return margin.quantize(Decimal('0.01'))
        return Decimal('0')

    def missing_ingredients(self, quantity=1):
        """
        Names of ingredients whose stock cannot cover ``quantity`` portions.
        An ingredient whose inventory item was removed counts as missing.
        """
        missing = []
        for ingredient in self.ingredients.select_related('inventory_item'):
            stock_item = ingredient.inventory_item
            if stock_item is None:
                missing.append('(deleted inventory item)')
            elif stock_item.current_stock < ingredient.quantity * quantity:
                missing.append(stock_item.name)
        return missing

    def can_be_prepared(self, quantity=1):
        return not self.missing_ingredients(quantity)


class MenuItemIngredient(models.Model):
    UNIT_CHOICES = [
        ('kg', 'Kilograms'),
        ('g', 'Grams'),
        ('l', 'Litres'),
        ('ml', 'Millilitres'),
        ('pieces', 'Pieces'),
        ('cups', 'Cups'),
        ('tbsp', 'Tablespoons'),
        ('tsp', 'Teaspoons'),
    ]

    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='ingredients')
    inventory_item = models.ForeignKey(
        InventoryItem, on_delete=models.SET_NULL, null=True, related_name='used_in'
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=3, validators=[MinValueValidator(Decimal('0'))])
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'menu_item_ingredients'
        ordering = ['position', 'id']

    def __str__(self):
        name = self.inventory_item.name if self.inventory_item else 'deleted item'
        return f"{self.menu_item.name} - {self.quantity} {self.unit} {name}"
