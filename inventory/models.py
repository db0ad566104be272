import math
import time
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from authentication.models import TimeStampedModel


class InventoryItemQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        """Active items at or below their minimum level, lowest stock first."""
        return self.active().filter(current_stock__lte=F('minimum_stock')).order_by('current_stock')

    def out_of_stock(self):
        return self.active().filter(current_stock__lte=0).order_by('name')

    def expiring(self, days=7):
        """Active items that expire within ``days`` days (already expired included)."""
        cutoff = timezone.now() + timedelta(days=days)
        return self.active().filter(expiry_date__lte=cutoff).order_by('expiry_date')

    def with_stock_status(self, stock_status):
        if stock_status == InventoryItem.OUT_OF_STOCK:
            return self.filter(current_stock__lte=0)
        if stock_status == InventoryItem.LOW_STOCK:
            return self.filter(current_stock__lte=F('minimum_stock'))
        if stock_status == InventoryItem.IN_STOCK:
            return self.filter(current_stock__gt=F('minimum_stock'))
        if stock_status == InventoryItem.OVERSTOCK:
            return self.filter(maximum_stock__isnull=False, current_stock__gte=F('maximum_stock'))
        return self


class InventoryItem(TimeStampedModel):
    """A stocked ingredient or supply, measured in ``unit``."""
    CATEGORY_CHOICES = [
        ('food', 'Food'),
        ('beverage', 'Beverage'),
        ('alcohol', 'Alcohol'),
        ('supplies', 'Supplies'),
        ('cleaning', 'Cleaning'),
        ('other', 'Other'),
    ]

    UNIT_CHOICES = [
        ('kg', 'Kilograms'),
        ('g', 'Grams'),
        ('l', 'Litres'),
        ('ml', 'Millilitres'),
        ('pieces', 'Pieces'),
        ('bottles', 'Bottles'),
        ('cans', 'Cans'),
        ('boxes', 'Boxes'),
        ('packets', 'Packets'),
    ]

    OUT_OF_STOCK = 'out_of_stock'
    LOW_STOCK = 'low_stock'
    OVERSTOCK = 'overstock'
    IN_STOCK = 'in_stock'
    STOCK_STATUS_CHOICES = [
        (OUT_OF_STOCK, 'Out of stock'),
        (LOW_STOCK, 'Low stock'),
        (OVERSTOCK, 'Overstock'),
        (IN_STOCK, 'In stock'),
    ]

    non_negative = MinValueValidator(Decimal('0'))

    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=300, blank=True)
    sku = models.CharField(max_length=50, unique=True, blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    unit = models.CharField(max_length=20, choices=UNIT_CHOICES)
    current_stock = models.DecimalField(max_digits=12, decimal_places=3, default=0, validators=[non_negative])
    minimum_stock = models.DecimalField(max_digits=12, decimal_places=3, default=10, validators=[non_negative])
    maximum_stock = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True, validators=[non_negative]
    )
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, validators=[non_negative])

    supplier_name = models.CharField(max_length=100, blank=True)
    supplier_contact = models.CharField(max_length=50, blank=True)
    supplier_email = models.EmailField(blank=True)

    expiry_date = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    last_restocked = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='inventory_items'
    )

    objects = InventoryItemQuerySet.as_manager()

    class Meta:
        db_table = 'inventory_items'
        ordering = ['name']
        indexes = [
            models.Index(fields=['category'], name='inventory_i_categor_5b1c4d_idx'),
            models.Index(fields=['current_stock'], name='inventory_i_current_8e2f7a_idx'),
            models.Index(fields=['is_active'], name='inventory_i_is_acti_3d9a61_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(current_stock__gte=0), name='inventory_stock_non_negative'),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def stock_status(self):
        if self.current_stock <= 0:
            return self.OUT_OF_STOCK
        if self.current_stock <= self.minimum_stock:
            return self.LOW_STOCK
        if self.maximum_stock and self.current_stock >= self.maximum_stock:
            return self.OVERSTOCK
        return self.IN_STOCK

    @property
    def stock_value(self):
        return (Decimal(self.current_stock) * Decimal(self.unit_cost)).quantize(Decimal('0.01'))

    @property
    def days_until_expiry(self):
        if not self.expiry_date:
            return None
        remaining = self.expiry_date - timezone.now()
        return math.ceil(remaining.total_seconds() / 86400)

    @classmethod
    def generate_sku(cls, name):
        prefix = name[:3].upper()
        stamp = int(time.time() * 1000)
        sku = f"{prefix}{str(stamp)[-6:]}"
        while cls.objects.filter(sku=sku).exists():
            stamp += 1
            sku = f"{prefix}{str(stamp)[-6:]}"
        return sku

    def save(self, *args, **kwargs):
        if self.sku:
            self.sku = self.sku.strip().upper()
        elif self._state.adding:
            self.sku = self.generate_sku(self.name)
        super().save(*args, **kwargs)
