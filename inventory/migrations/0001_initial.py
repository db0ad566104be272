from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.CharField(blank=True, max_length=300)),
                ('sku', models.CharField(blank=True, max_length=50, unique=True)),
                ('category', models.CharField(choices=[('food', 'Food'), ('beverage', 'Beverage'), ('alcohol', 'Alcohol'), ('supplies', 'Supplies'), ('cleaning', 'Cleaning'), ('other', 'Other')], max_length=20)),
                ('unit', models.CharField(choices=[('kg', 'Kilograms'), ('g', 'Grams'), ('l', 'Litres'), ('ml', 'Millilitres'), ('pieces', 'Pieces'), ('bottles', 'Bottles'), ('cans', 'Cans'), ('boxes', 'Boxes'), ('packets', 'Packets')], max_length=20)),
                ('current_stock', models.DecimalField(decimal_places=3, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('minimum_stock', models.DecimalField(decimal_places=3, default=10, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('maximum_stock', models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('unit_cost', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('supplier_name', models.CharField(blank=True, max_length=100)),
                ('supplier_contact', models.CharField(blank=True, max_length=50)),
                ('supplier_email', models.EmailField(blank=True, max_length=254)),
                ('expiry_date', models.DateTimeField(blank=True, null=True)),
                ('location', models.CharField(blank=True, max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('last_restocked', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_items',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['category'], name='inventory_i_categor_5b1c4d_idx'),
                    models.Index(fields=['current_stock'], name='inventory_i_current_8e2f7a_idx'),
                    models.Index(fields=['is_active'], name='inventory_i_is_acti_3d9a61_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('current_stock__gte', 0)), name='inventory_stock_non_negative'),
                ],
            },
        ),
    ]
