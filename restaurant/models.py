from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from authentication.models import TimeStampedModel

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


def default_business_hours():
    hours = {day: {'open': '09:00', 'close': '22:00', 'closed': False} for day in WEEKDAYS}
    hours['friday']['close'] = '23:00'
    hours['saturday'] = {'open': '10:00', 'close': '23:00', 'closed': False}
    hours['sunday'] = {'open': '10:00', 'close': '22:00', 'closed': False}
    return hours


class RestaurantSettings(TimeStampedModel):
    """Single-row restaurant configuration, always stored under ``SINGLETON_PK``."""
    SINGLETON_PK = 1

    CURRENCY_CHOICES = [
        ('RWF', 'Rwandan franc'),
        ('USD', 'US dollar'),
        ('EUR', 'Euro'),
        ('GBP', 'Pound sterling'),
    ]
    PAPER_SIZE_CHOICES = [
        ('80mm', '80mm'),
        ('58mm', '58mm'),
    ]

    # General
    restaurant_name = models.CharField(max_length=100, default='My Restaurant')
    phone = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=300, blank=True)
    email = models.EmailField(blank=True)

    # Regional
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='RWF')
    timezone = models.CharField(max_length=50, default='Africa/Kigali')

    # Financial
    tax_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=18,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    service_charge = models.DecimalField(
        max_digits=5, decimal_places=2, default=10,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    # Printing
    receipt_printer_name = models.CharField(max_length=100, blank=True)
    receipt_paper_size = models.CharField(max_length=4, choices=PAPER_SIZE_CHOICES, default='80mm')
    kitchen_printer_name = models.CharField(max_length=100, blank=True)
    auto_print_kitchen = models.BooleanField(default=True)
    print_customer_copy = models.BooleanField(default=True)
    print_kitchen_copy = models.BooleanField(default=True)

    # Notifications
    notify_new_orders = models.BooleanField(default=True)
    notify_order_updates = models.BooleanField(default=True)
    notify_low_stock = models.BooleanField(default=True)
    notify_expiring_items = models.BooleanField(default=True)
    notify_system_updates = models.BooleanField(default=False)
    notify_security_alerts = models.BooleanField(default=True)

    business_hours = models.JSONField(default=default_business_hours)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    last_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        db_table = 'restaurant_settings'
        verbose_name = 'Restaurant settings'
        verbose_name_plural = 'Restaurant settings'

    def __str__(self):
        return self.restaurant_name

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # The settings row is never removed
        return (0, {})

    @classmethod
    def load(cls):
        settings_row, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return settings_row
