import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import restaurant.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RestaurantSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('restaurant_name', models.CharField(default='My Restaurant', max_length=100)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('address', models.CharField(blank=True, max_length=300)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('currency', models.CharField(choices=[('RWF', 'Rwandan franc'), ('USD', 'US dollar'), ('EUR', 'Euro'), ('GBP', 'Pound sterling')], default='RWF', max_length=3)),
                ('timezone', models.CharField(default='Africa/Kigali', max_length=50)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=18, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('service_charge', models.DecimalField(decimal_places=2, default=10, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('receipt_printer_name', models.CharField(blank=True, max_length=100)),
                ('receipt_paper_size', models.CharField(choices=[('80mm', '80mm'), ('58mm', '58mm')], default='80mm', max_length=4)),
                ('kitchen_printer_name', models.CharField(blank=True, max_length=100)),
                ('auto_print_kitchen', models.BooleanField(default=True)),
                ('print_customer_copy', models.BooleanField(default=True)),
                ('print_kitchen_copy', models.BooleanField(default=True)),
                ('notify_new_orders', models.BooleanField(default=True)),
                ('notify_order_updates', models.BooleanField(default=True)),
                ('notify_low_stock', models.BooleanField(default=True)),
                ('notify_expiring_items', models.BooleanField(default=True)),
                ('notify_system_updates', models.BooleanField(default=False)),
                ('notify_security_alerts', models.BooleanField(default=True)),
                ('business_hours', models.JSONField(default=restaurant.models.default_business_hours)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('last_updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Restaurant settings',
                'verbose_name_plural': 'Restaurant settings',
                'db_table': 'restaurant_settings',
            },
        ),
    ]
