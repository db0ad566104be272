"""Pytest configuration and fixtures."""
from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from authentication.models import User
from inventory.models import InventoryItem
from menu.models import Category, MenuItem, MenuItemIngredient
from orders.models import Table

PASSWORD = 'testpass123'


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    """Throttle counters live in the cache; start every test with a clean slate."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def factory(role, username=None, **extra):
        username = username or f"{role}_user"
        return User.objects.create_user(
            username=username,
            email=extra.pop('email', f"{username}@example.com"),
            password=extra.pop('password', PASSWORD),
            role=role,
            first_name=extra.pop('first_name', role.replace('_', ' ').title()),
            last_name=extra.pop('last_name', 'Tester'),
            **extra,
        )
    return factory


@pytest.fixture
def admin(make_user):
    return make_user(User.ROLE_ADMIN)


@pytest.fixture
def manager(make_user):
    return make_user(User.ROLE_MANAGER)


@pytest.fixture
def cashier(make_user):
    return make_user(User.ROLE_CASHIER)


@pytest.fixture
def waiter(make_user):
    return make_user(User.ROLE_WAITER)


@pytest.fixture
def stock_manager(make_user):
    return make_user(User.ROLE_STOCK_MANAGER)


@pytest.fixture
def api_client():
    """Anonymous API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Build an API client authenticated as ``user``."""
    def factory(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return factory


@pytest.fixture
def buns(db, admin):
    return InventoryItem.objects.create(
        name='Buns',
        category='food',
        unit='pieces',
        current_stock=Decimal('10'),
        minimum_stock=Decimal('2'),
        unit_cost=Decimal('200'),
        created_by=admin,
    )


@pytest.fixture
def mains(db, admin):
    return Category.objects.create(name='Mains', created_by=admin)


@pytest.fixture
def burger(mains, buns, admin):
    item = MenuItem.objects.create(
        name='Burger',
        category=mains,
        price=Decimal('12000'),
        cost=Decimal('5000'),
        preparation_time=20,
        created_by=admin,
    )
    MenuItemIngredient.objects.create(menu_item=item, inventory_item=buns, quantity=Decimal('1'), unit='pieces')
    return item


@pytest.fixture
def table(db, admin):
    return Table.objects.create(number='T1', capacity=4, location='indoor', created_by=admin)
