"""Restaurant settings and system information."""
from decimal import Decimal

import pytest

from restaurant.models import RestaurantSettings


pytestmark = pytest.mark.django_db


class TestRestaurantSettings:

    def test_defaults_are_created_on_first_read(self, client_for, waiter):
        response = client_for(waiter).get('/api/settings/')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['restaurant_name'] == 'My Restaurant'
        assert data['currency'] == 'RWF'
        assert Decimal(data['tax_rate']) == Decimal('18')
        assert data['business_hours']['saturday'] == {'open': '10:00', 'close': '23:00', 'closed': False}
        assert RestaurantSettings.objects.count() == 1

    def test_requires_authentication(self, api_client):
        assert api_client.get('/api/settings/').status_code == 401

    def test_manager_updates_subset(self, client_for, manager):
        response = client_for(manager).put('/api/settings/', {
            'restaurant_name': 'Kigali Bistro',
            'service_charge': '5',
        }, format='json')

        assert response.status_code == 200
        assert response.json()['message'] == 'Settings updated successfully'
        data = response.json()['data']
        assert data['restaurant_name'] == 'Kigali Bistro'
        assert data['currency'] == 'RWF'
        assert data['last_updated_by']['id'] == manager.id
        assert data['created_by']['id'] == manager.id

    def test_waiter_cannot_update(self, client_for, waiter):
        response = client_for(waiter).put('/api/settings/', {'restaurant_name': 'Mine'}, format='json')

        assert response.status_code == 403
        assert RestaurantSettings.load().restaurant_name == 'My Restaurant'

    def test_business_hours_merge_per_day(self, client_for, admin):
        response = client_for(admin).put('/api/settings/', {
            'business_hours': {'sunday': {'closed': True}, 'monday': {'open': '07:30'}},
        }, format='json')

        assert response.status_code == 200
        hours = RestaurantSettings.load().business_hours
        assert hours['sunday'] == {'open': '10:00', 'close': '22:00', 'closed': True}
        assert hours['monday'] == {'open': '07:30', 'close': '22:00', 'closed': False}
        assert hours['friday']['close'] == '23:00'

    def test_business_hours_validation(self, client_for, admin):
        client = client_for(admin)

        unknown_day = client.put('/api/settings/', {'business_hours': {'funday': {'closed': True}}}, format='json')
        bad_time = client.put('/api/settings/', {'business_hours': {'monday': {'open': '25:00'}}}, format='json')

        assert unknown_day.status_code == 400
        assert bad_time.status_code == 400

    def test_tax_rate_bounds(self, client_for, admin):
        response = client_for(admin).put('/api/settings/', {'tax_rate': '150'}, format='json')
        assert response.status_code == 400

    def test_settings_row_survives_delete(self):
        row = RestaurantSettings.load()
        row.delete()

        assert RestaurantSettings.objects.count() == 1
        assert RestaurantSettings.load().pk == RestaurantSettings.SINGLETON_PK


def test_system_info(client_for, waiter, settings):
    settings.ENVIRONMENT = 'test'

    response = client_for(waiter).get('/api/settings/system/')

    assert response.status_code == 200
    data = response.json()['data']
    assert data['environment'] == 'test'
    assert data['version'] == settings.APP_VERSION
    assert data['pythonVersion']
