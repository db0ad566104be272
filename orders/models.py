import time
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from authentication.models import TimeStampedModel
from menu.models import MenuItem

MONEY_STEP = Decimal('0.01')
MONEY_FIELD = dict(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])


def to_money(value):
    return Decimal(value or 0).quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def millis():
    return int(time.time() * 1000)


class TableQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def available(self, location=None):
        queryset = self.active().filter(status=Table.STATUS_AVAILABLE)
        if location:
            queryset = queryset.filter(location=location)
        return queryset.order_by('number')


class Table(TimeStampedModel):
    LOCATION_CHOICES = [
        ('indoor', 'Indoor'),
        ('outdoor', 'Outdoor'),
        ('bar', 'Bar'),
        ('vip', 'VIP'),
        ('private', 'Private'),
    ]

    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_RESERVED = 'reserved'
    STATUS_CLEANING = 'cleaning'
    STATUS_OUT_OF_ORDER = 'out_of_order'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_RESERVED, 'Reserved'),
        (STATUS_CLEANING, 'Cleaning'),
        (STATUS_OUT_OF_ORDER, 'Out of order'),
    ]

    number = models.CharField(max_length=20, unique=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    location = models.CharField(max_length=20, choices=LOCATION_CHOICES, default='indoor')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)
    # Scan code embedded in the customer menu link; assigned once, never regenerated
    qr_code = models.CharField(max_length=100, unique=True, editable=False)
    is_active = models.BooleanField(default=True)
    notes = models.CharField(max_length=200, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='tables'
    )

    objects = TableQuerySet.as_manager()

    class Meta:
        db_table = 'tables'
        ordering = ['number']
        indexes = [
            models.Index(fields=['status'], name='tables_status_4a1e9c_idx'),
            models.Index(fields=['location'], name='tables_locatio_b27d05_idx'),
        ]

    def __str__(self):
        return f"Table {self.number}"

    def save(self, *args, **kwargs):
        if not self.qr_code and self._state.adding:
            self.qr_code = f"table-{self.number}-{millis()}"
        super().save(*args, **kwargs)

    def set_status(self, status):
        self.status = status
        self.save(update_fields=['status', 'updated_at'])


class OrderQuerySet(models.QuerySet):

    def active(self):
        """Orders the kitchen and floor still work on, oldest first."""
        return self.filter(status__in=Order.ACTIVE_STATUSES).order_by('created_at', 'id')

    def today(self):
        start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        return self.filter(created_at__gte=start, created_at__lt=start + timedelta(days=1))

    def between(self, start=None, end=None):
        queryset = self
        if start:
            queryset = queryset.filter(created_at__gte=start)
        if end:
            queryset = queryset.filter(created_at__lte=end)
        return queryset


class Order(TimeStampedModel):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    PREPARING = 'preparing'
    READY = 'ready'
    SERVED = 'served'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (PREPARING, 'Preparing'),
        (READY, 'Ready'),
        (SERVED, 'Served'),
        (PAID, 'Paid'),
        (CANCELLED, 'Cancelled'),
    ]
    ACTIVE_STATUSES = (PENDING, CONFIRMED, PREPARING, READY)
    TERMINAL_STATUSES = (PAID, CANCELLED)

    DINE_IN = 'dine_in'
    ORDER_TYPE_CHOICES = [
        (DINE_IN, 'Dine in'),
        ('takeaway', 'Takeaway'),
        ('delivery', 'Delivery'),
    ]

    PAYMENT_PENDING = 'pending'
    PAYMENT_PARTIAL = 'partial'
    PAYMENT_PAID = 'paid'
    PAYMENT_REFUNDED = 'refunded'
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, 'Pending'),
        (PAYMENT_PARTIAL, 'Partial'),
        (PAYMENT_PAID, 'Paid'),
        (PAYMENT_REFUNDED, 'Refunded'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('mobile_money', 'Mobile money'),
        ('bank_transfer', 'Bank transfer'),
    ]

    # Outcome of the ingredient deduction run on confirmation
    DEDUCTION_NOT_APPLICABLE = 'not_applicable'
    DEDUCTION_PENDING = 'pending'
    DEDUCTION_COMPLETED = 'completed'
    DEDUCTION_PARTIAL = 'partial'
    DEDUCTION_FAILED = 'failed'
    DEDUCTION_STATUS_CHOICES = [
        (DEDUCTION_NOT_APPLICABLE, 'Not applicable'),
        (DEDUCTION_PENDING, 'Pending'),
        (DEDUCTION_COMPLETED, 'Completed'),
        (DEDUCTION_PARTIAL, 'Partial'),
        (DEDUCTION_FAILED, 'Failed'),
    ]

    order_number = models.CharField(max_length=30, unique=True, editable=False)
    table = models.ForeignKey(Table, on_delete=models.PROTECT, related_name='orders')

    customer_name = models.CharField(max_length=100, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True, db_index=True)
    customer_email = models.EmailField(blank=True)

    subtotal = models.DecimalField(**MONEY_FIELD)
    tax = models.DecimalField(**MONEY_FIELD)
    discount = models.DecimalField(**MONEY_FIELD)
    total = models.DecimalField(**MONEY_FIELD)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    order_type = models.CharField(max_length=20, choices=ORDER_TYPE_CHOICES, default=DINE_IN)
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING, db_index=True
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)

    waiter = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='served_orders'
    )
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='cashed_orders'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_orders'
    )
    notes = models.CharField(max_length=500, blank=True)

    estimated_prep_time = models.PositiveIntegerField(default=30)
    actual_prep_time = models.PositiveIntegerField(null=True, blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=500, blank=True)

    deduction_status = models.CharField(
        max_length=20, choices=DEDUCTION_STATUS_CHOICES, default=DEDUCTION_NOT_APPLICABLE
    )
    deduction_errors = models.JSONField(default=list, blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='orders_created_9f3b2e_idx'),
        ]

    def __str__(self):
        return f"{self.order_number} - {self.table}"

    @staticmethod
    def generate_order_number():
        date_part = timezone.localdate().strftime('%Y%m%d')
        stamp = millis()
        number = f"ORD{date_part}{str(stamp)[-6:]}"
        while Order.objects.filter(order_number=number).exists():
            stamp += 1
            number = f"ORD{date_part}{str(stamp)[-6:]}"
        return number

    @property
    def is_dine_in(self):
        return self.order_type == self.DINE_IN

    @property
    def order_duration(self):
        """Minutes from creation to service."""
        if self.served_at and self.created_at:
            return round((self.served_at - self.created_at).total_seconds() / 60)
        return None

    def calculate_totals(self):
        """Recalculate subtotal and total from the line items"""
        subtotal = sum((item.total_price for item in self.items.all()), Decimal('0.00'))
        self.subtotal = to_money(subtotal)
        self.total = to_money(self.subtotal + to_money(self.tax) - to_money(self.discount))

    def save(self, *args, **kwargs):
        if not self.order_number and self._state.adding:
            self.order_number = self.generate_order_number()
        if self.pk and self.items.exists():
            self.calculate_totals()
            update_fields = kwargs.get('update_fields')
            if update_fields is not None:
                kwargs['update_fields'] = set(update_fields) | {'subtotal', 'total'}
        super().save(*args, **kwargs)


class OrderItem(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PREPARING = 'preparing'
    STATUS_READY = 'ready'
    STATUS_SERVED = 'served'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PREPARING, 'Preparing'),
        (STATUS_READY, 'Ready'),
        (STATUS_SERVED, 'Served'),
    ]

    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    menu_item = models.ForeignKey(MenuItem, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    total_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    special_instructions = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    prepared_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'order_items'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.menu_item.name}"

    def save(self, *args, **kwargs):
        self.unit_price = to_money(self.unit_price)
        self.total_price = to_money(self.unit_price * self.quantity)
        super().save(*args, **kwargs)
