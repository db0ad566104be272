"""Inventory items and the stock ledger."""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from authentication.exceptions import BusinessRuleError
from inventory.models import InventoryItem
from inventory.stock import ADD, SET, SUBTRACT, InvalidStockOperation, apply_stock_operation


pytestmark = pytest.mark.django_db


def make_item(name, stock, minimum='5', **extra):
    return InventoryItem.objects.create(
        name=name,
        category=extra.pop('category', 'food'),
        unit=extra.pop('unit', 'kg'),
        current_stock=Decimal(stock),
        minimum_stock=Decimal(minimum),
        unit_cost=extra.pop('unit_cost', Decimal('100')),
        **extra,
    )


class TestStockLedger:

    def test_add_stamps_restock_time(self):
        item = make_item('Rice', '2')

        old, new = apply_stock_operation(item, '3.5', ADD, reason='Delivery')

        assert (old, new) == (Decimal('2'), Decimal('5.500'))
        item.refresh_from_db()
        assert item.current_stock == Decimal('5.5')
        assert item.last_restocked is not None

    def test_subtract_clamps_at_zero(self):
        item = make_item('Flour', '4')

        old, new = apply_stock_operation(item, 10, SUBTRACT)

        assert new == Decimal('0')
        item.refresh_from_db()
        assert item.current_stock == Decimal('0')

    def test_set_replaces_stock(self):
        item = make_item('Salt', '4')
        apply_stock_operation(item, 12, SET)

        item.refresh_from_db()
        assert item.current_stock == Decimal('12')

    def test_unknown_operation(self):
        item = make_item('Sugar', '4')
        with pytest.raises(InvalidStockOperation):
            apply_stock_operation(item, 1, 'multiply')

    def test_invalid_quantity(self):
        item = make_item('Pepper', '4')
        with pytest.raises(BusinessRuleError):
            apply_stock_operation(item, 'lots', ADD)


class TestStockStatus:

    def test_status_boundaries(self):
        assert make_item('A', '0').stock_status == InventoryItem.OUT_OF_STOCK
        assert make_item('B', '5', minimum='5').stock_status == InventoryItem.LOW_STOCK
        assert make_item('C', '6', minimum='5').stock_status == InventoryItem.IN_STOCK
        assert make_item('D', '50', minimum='5', maximum_stock=Decimal('50')).stock_status == InventoryItem.OVERSTOCK

    def test_sku_generated_from_name(self):
        item = make_item('tomatoes', '1')
        assert item.sku.startswith('TOM')
        assert len(item.sku) == 9


class TestInventoryApi:

    def test_create_item_with_initial_stock(self, client_for, stock_manager):
        response = client_for(stock_manager).post('/api/inventory/', {
            'name': 'Tomatoes',
            'category': 'food',
            'unit': 'kg',
            'current_stock': '20',
            'minimum_stock': '5',
            'unit_cost': '800',
        })

        assert response.status_code == 201
        item = InventoryItem.objects.get(name='Tomatoes')
        assert item.last_restocked is not None
        assert response.json()['data']['inventoryItem']['stock_status'] == InventoryItem.IN_STOCK

    def test_duplicate_name_rejected(self, client_for, manager):
        make_item('Milk', '3')
        response = client_for(manager).post('/api/inventory/', {
            'name': 'Milk', 'category': 'beverage', 'unit': 'l', 'unit_cost': '900',
        })

        assert response.status_code == 400
        assert 'name: name already exists' in response.json()['errors']

    def test_waiter_has_no_inventory_access(self, client_for, waiter):
        assert client_for(waiter).get('/api/inventory/').status_code == 403

    def test_list_filters_by_stock_status(self, client_for, stock_manager):
        make_item('Empty', '0')
        make_item('Low', '2')
        make_item('Plenty', '40')

        response = client_for(stock_manager).get('/api/inventory/', {'stockStatus': 'low_stock'})

        names = {item['name'] for item in response.json()['data']['inventoryItems']}
        assert names == {'Empty', 'Low'}

    def test_update_stock_reports_change(self, client_for, stock_manager):
        item = make_item('Onions', '10')

        response = client_for(stock_manager).patch(
            f'/api/inventory/{item.id}/stock/', {'quantity': '4', 'operation': 'subtract', 'reason': 'Prep'}
        )

        assert response.status_code == 200
        data = response.json()['data']
        assert Decimal(str(data['oldStock'])) == Decimal('10')
        assert Decimal(str(data['newStock'])) == Decimal('6')
        assert Decimal(str(data['change'])) == Decimal('-4')

    def test_update_stock_rejects_bad_operation(self, client_for, stock_manager):
        item = make_item('Garlic', '10')

        response = client_for(stock_manager).patch(
            f'/api/inventory/{item.id}/stock/', {'quantity': '4', 'operation': 'double'}
        )

        assert response.status_code == 400
        assert 'operation: Invalid operation. Use add, subtract, or set' in response.json()['errors']

    def test_update_stock_unknown_item(self, client_for, stock_manager):
        response = client_for(stock_manager).patch(
            '/api/inventory/9999/stock/', {'quantity': '4', 'operation': 'add'}
        )

        assert response.status_code == 404
        assert response.json()['message'] == 'Inventory item not found'

    def test_bulk_update_reports_each_entry(self, client_for, stock_manager):
        first = make_item('Beans', '1')
        second = make_item('Peas', '8')

        response = client_for(stock_manager).post('/api/inventory/bulk-stock-update/', {
            'updates': [
                {'id': first.id, 'quantity': 5, 'operation': 'add'},
                {'id': second.id, 'quantity': 2, 'operation': 'subtract'},
                {'id': 9999, 'quantity': 1, 'operation': 'add'},
                {'id': first.id, 'quantity': 1, 'operation': 'explode'},
            ],
        }, format='json')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['totalProcessed'] == 4
        assert data['successCount'] == 2
        assert data['errorCount'] == 2
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.current_stock == Decimal('6')
        assert second.current_stock == Decimal('6')

    def test_bulk_update_reports_malformed_entries(self, client_for, stock_manager):
        item = make_item('Lentils', '10')

        response = client_for(stock_manager).post('/api/inventory/bulk-stock-update/', {
            'updates': [
                {'id': item.id, 'quantity': '5', 'operation': 'add'},
                {'id': [1], 'quantity': 1, 'operation': 'add'},
                {'id': item.id, 'quantity': '1e20', 'operation': 'add'},
                {'id': item.id, 'quantity': '-2', 'operation': 'subtract'},
                {'quantity': 1, 'operation': 'add'},
            ],
        }, format='json')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['successCount'] == 1
        assert data['errorCount'] == 4
        assert Decimal(str(data['successful'][0]['quantity'])) == Decimal('5')
        assert any(entry['error'].startswith('id:') for entry in data['failed'])
        item.refresh_from_db()
        assert item.current_stock == Decimal('15')

    def test_bulk_update_requires_entries(self, client_for, stock_manager):
        response = client_for(stock_manager).post('/api/inventory/bulk-stock-update/', {'updates': []}, format='json')

        assert response.status_code == 400
        assert 'updates: Updates array is required' in response.json()['errors']

    def test_only_admin_or_manager_deletes(self, client_for, stock_manager, manager):
        item = make_item('Basil', '1')

        assert client_for(stock_manager).delete(f'/api/inventory/{item.id}/').status_code == 403
        assert client_for(manager).delete(f'/api/inventory/{item.id}/').status_code == 200

    def test_expiring_items_window(self, client_for, stock_manager):
        make_item('Cream', '3', expiry_date=timezone.now() + timedelta(days=2))
        make_item('Cheese', '3', expiry_date=timezone.now() + timedelta(days=30))

        response = client_for(stock_manager).get('/api/inventory/expiring/', {'days': 5})

        data = response.json()['data']
        assert [item['name'] for item in data['expiringItems']] == ['Cream']
        assert data['daysFilter'] == 5
        assert data['expiringItems'][0]['days_until_expiry'] in (2, 3)

    def test_summary(self, client_for, manager):
        make_item('Empty', '0', unit_cost=Decimal('10'))
        make_item('Stocked', '10', unit_cost=Decimal('10'), category='beverage')

        response = client_for(manager).get('/api/inventory/summary/')

        data = response.json()['data']
        assert data['summary']['totalItems'] == 2
        assert data['summary']['outOfStockCount'] == 1
        assert data['summary']['lowStockCount'] == 1
        assert Decimal(str(data['summary']['totalValue'])) == Decimal('100')
        assert {row['category'] for row in data['categoryBreakdown']} == {'food', 'beverage'}
        assert len(data['alerts']['outOfStock']) == 1
