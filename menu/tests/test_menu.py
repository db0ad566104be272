"""Categories, menu items and the public customer menu."""
from decimal import Decimal

import pytest

from inventory.models import InventoryItem
from menu.models import Category, MenuItem, MenuItemIngredient
from orders.models import Order, OrderItem


pytestmark = pytest.mark.django_db


class TestCategories:

    def test_list_hides_inactive_unless_asked(self, client_for, waiter, mains):
        Category.objects.create(name='Retired', is_active=False)
        client = client_for(waiter)

        active = client.get('/api/menu/categories/').json()['data']['categories']
        everything = client.get('/api/menu/categories/', {'includeInactive': 'true'}).json()['data']['categories']

        assert [category['name'] for category in active] == ['Mains']
        assert {category['name'] for category in everything} == {'Mains', 'Retired'}

    def test_create_requires_admin_or_manager(self, client_for, waiter, manager):
        assert client_for(waiter).post('/api/menu/categories/', {'name': 'Drinks'}).status_code == 403

        response = client_for(manager).post('/api/menu/categories/', {'name': 'Drinks'})
        assert response.status_code == 201
        assert response.json()['data']['category']['name'] == 'Drinks'

    def test_duplicate_name_case_insensitive(self, client_for, manager, mains):
        response = client_for(manager).post('/api/menu/categories/', {'name': 'mains'})

        assert response.status_code == 400
        assert 'name: Category with this name already exists' in response.json()['errors']

    def test_cannot_delete_category_in_use(self, client_for, manager, burger):
        response = client_for(manager).delete(f'/api/menu/categories/{burger.category_id}/')

        assert response.status_code == 400
        assert response.json()['message'] == 'Cannot delete category with existing menu items'

    def test_delete_empty_category(self, client_for, manager, mains):
        assert client_for(manager).delete(f'/api/menu/categories/{mains.id}/').status_code == 200
        assert not Category.objects.filter(pk=mains.pk).exists()


class TestMenuItems:

    def test_create_with_ingredients(self, client_for, manager, mains, buns):
        response = client_for(manager).post('/api/menu/items/', {
            'name': 'Cheeseburger',
            'category': mains.id,
            'price': '14000',
            'cost': '7000',
            'preparation_time': 25,
            'allergens': ['dairy', 'gluten', 'dairy'],
            'tags': ['popular'],
            'ingredients': [{'item': buns.id, 'quantity': '1', 'unit': 'pieces'}],
        }, format='json')

        assert response.status_code == 201
        data = response.json()['data']['menuItem']
        assert data['allergens'] == ['dairy', 'gluten']
        assert data['ingredients'][0]['item_name'] == 'Buns'
        assert Decimal(data['profit_margin']) == Decimal('50.00')

    def test_update_replaces_ingredient_list(self, client_for, manager, burger, buns):
        other = InventoryItem.objects.create(
            name='Patty', category='food', unit='pieces', current_stock=5, unit_cost=Decimal('900')
        )

        response = client_for(manager).patch(f'/api/menu/items/{burger.id}/', {
            'ingredients': [{'item': other.id, 'quantity': '2', 'unit': 'pieces'}],
        }, format='json')

        assert response.status_code == 200
        ingredients = response.json()['data']['menuItem']['ingredients']
        assert [ingredient['item_name'] for ingredient in ingredients] == ['Patty']
        assert MenuItemIngredient.objects.filter(menu_item=burger).count() == 1

    def test_invalid_allergen_rejected(self, client_for, manager, mains):
        response = client_for(manager).post('/api/menu/items/', {
            'name': 'Mystery', 'category': mains.id, 'price': '100', 'allergens': ['glitter'],
        }, format='json')
        assert response.status_code == 400

    def test_list_filters_and_search(self, client_for, waiter, burger, mains):
        MenuItem.objects.create(name='Salad', category=mains, price=Decimal('5000'), is_available=False)
        MenuItem.objects.create(name='Old Soup', category=mains, price=Decimal('3000'), is_active=False)
        client = client_for(waiter)

        listed = client.get('/api/menu/items/').json()['data']
        assert {item['name'] for item in listed['menuItems']} == {'Burger', 'Salad'}
        assert listed['pagination']['total'] == 2

        available = client.get('/api/menu/items/', {'isAvailable': 'true'}).json()['data']['menuItems']
        assert [item['name'] for item in available] == ['Burger']

        found = client.get('/api/menu/items/', {'search': 'sal'}).json()['data']['menuItems']
        assert [item['name'] for item in found] == ['Salad']

    def test_toggle_availability(self, client_for, manager, burger):
        response = client_for(manager).patch(f'/api/menu/items/{burger.id}/toggle-availability/')

        assert response.status_code == 200
        assert response.json()['message'] == 'Menu item disabled successfully'
        burger.refresh_from_db()
        assert burger.is_available is False

    def test_item_on_an_order_cannot_be_deleted(self, client_for, manager, burger, table, waiter):
        order = Order.objects.create(table=table, waiter=waiter, created_by=waiter)
        OrderItem.objects.create(order=order, menu_item=burger, quantity=1, unit_price=burger.price)

        response = client_for(manager).delete(f'/api/menu/items/{burger.id}/')

        assert response.status_code == 400
        assert MenuItem.objects.filter(pk=burger.pk).exists()

    def test_unknown_item_is_404(self, client_for, waiter):
        response = client_for(waiter).get('/api/menu/items/4242/')

        assert response.status_code == 404
        assert response.json()['message'] == 'Menu item not found'


class TestPreparability:

    def test_can_be_prepared_tracks_stock(self, burger, buns):
        assert burger.can_be_prepared()
        assert burger.can_be_prepared(10)
        assert not burger.can_be_prepared(11)

        buns.current_stock = 0
        buns.save()
        assert burger.missing_ingredients() == ['Buns']

    def test_deleted_inventory_item_counts_as_missing(self, burger, buns):
        buns.delete()
        assert not burger.can_be_prepared()


class TestCustomerMenu:

    def test_public_menu_groups_orderable_items(self, api_client, burger, mains):
        MenuItem.objects.create(name='Hidden', category=mains, price=Decimal('1'), is_available=False)

        response = api_client.get('/api/menu/customer/')

        assert response.status_code == 200
        menu = response.json()['data']['menu']
        assert len(menu) == 1
        assert menu[0]['category']['name'] == 'Mains'
        assert [item['name'] for item in menu[0]['items']] == ['Burger']
        assert 'cost' not in menu[0]['items'][0]

    def test_table_scan_code_resolves(self, api_client, burger, table):
        response = api_client.get('/api/menu/customer/', {'table': table.qr_code})

        assert response.status_code == 200
        assert response.json()['data']['table']['number'] == 'T1'

    def test_unknown_scan_code(self, api_client, burger):
        response = api_client.get('/api/menu/customer/', {'table': 'table-X-1'})

        assert response.status_code == 404
        assert response.json()['message'] == 'Table not found'
