"""Tables, their status board and QR codes."""
import pytest

from orders.lifecycle import create_order
from orders.models import Table


pytestmark = pytest.mark.django_db


class TestTableCrud:

    def test_create_assigns_scan_code(self, client_for, manager):
        response = client_for(manager).post('/api/tables/', {'number': 'T7', 'capacity': 6, 'location': 'outdoor'})

        assert response.status_code == 201
        data = response.json()['data']['table']
        assert data['qr_code'].startswith('table-T7-')
        assert data['status'] == Table.STATUS_AVAILABLE
        assert data['created_by']['id'] == manager.id

    def test_scan_code_is_read_only(self, client_for, manager, table):
        original = table.qr_code

        client_for(manager).patch(f'/api/tables/{table.id}/', {'qr_code': 'hijacked', 'capacity': 8})

        table.refresh_from_db()
        assert table.qr_code == original
        assert table.capacity == 8

    def test_duplicate_number_case_insensitive(self, client_for, manager, table):
        response = client_for(manager).post('/api/tables/', {'number': 't1', 'capacity': 2})

        assert response.status_code == 400
        assert 'number: Table number already exists' in response.json()['errors']

    def test_capacity_must_be_positive(self, client_for, manager):
        response = client_for(manager).post('/api/tables/', {'number': 'T9', 'capacity': 0})
        assert response.status_code == 400

    def test_waiter_reads_but_cannot_write(self, client_for, waiter, table):
        client = client_for(waiter)

        assert client.get('/api/tables/').status_code == 200
        assert client.post('/api/tables/', {'number': 'T2', 'capacity': 2}).status_code == 403
        assert client.delete(f'/api/tables/{table.id}/').status_code == 403

    def test_list_defaults_to_active_tables(self, client_for, waiter, table):
        Table.objects.create(number='T2', capacity=2, location='bar', is_active=False)
        Table.objects.create(number='T3', capacity=2, location='bar')
        client = client_for(waiter)

        active = client.get('/api/tables/').json()['data']['tables']
        inactive = client.get('/api/tables/', {'isActive': 'false'}).json()['data']['tables']
        bar = client.get('/api/tables/', {'location': 'bar'}).json()['data']['tables']

        assert [entry['number'] for entry in active] == ['T1', 'T3']
        assert [entry['number'] for entry in inactive] == ['T2']
        assert [entry['number'] for entry in bar] == ['T3']

    def test_delete_unused_table(self, client_for, manager, table):
        response = client_for(manager).delete(f'/api/tables/{table.id}/')

        assert response.status_code == 200
        assert not Table.objects.filter(pk=table.pk).exists()

    def test_table_with_orders_cannot_be_deleted(self, client_for, manager, waiter, table, burger):
        create_order(waiter, table.id, [{'menuItemId': burger.id, 'quantity': 1}])

        response = client_for(manager).delete(f'/api/tables/{table.id}/')

        assert response.status_code == 400
        assert Table.objects.filter(pk=table.pk).exists()

    def test_unknown_table(self, client_for, waiter):
        response = client_for(waiter).get('/api/tables/4242/')

        assert response.status_code == 404
        assert response.json()['message'] == 'Table not found'


class TestTableBoard:

    def test_available_tables(self, client_for, waiter, table):
        Table.objects.create(number='T2', capacity=2, status=Table.STATUS_OCCUPIED)
        Table.objects.create(number='T3', capacity=2, location='vip')

        response = client_for(waiter).get('/api/tables/available/')
        data = response.json()['data']
        assert [entry['number'] for entry in data['tables']] == ['T1', 'T3']
        assert data['count'] == 2

        vip = client_for(waiter).get('/api/tables/available/', {'location': 'vip'}).json()['data']
        assert [entry['number'] for entry in vip['tables']] == ['T3']

    def test_summary_counts_every_status(self, client_for, manager, table):
        Table.objects.create(number='T2', capacity=2, status=Table.STATUS_OCCUPIED)
        Table.objects.create(number='T3', capacity=2, location='bar', status=Table.STATUS_CLEANING)

        data = client_for(manager).get('/api/tables/summary/').json()['data']

        assert data['totalTables'] == 3
        assert data['statusBreakdown'] == {
            'available': 1, 'occupied': 1, 'reserved': 0, 'cleaning': 1, 'out_of_order': 0,
        }
        assert data['locationBreakdown']['indoor'] == {'count': 2, 'available': 1, 'occupied': 1}
        assert data['locationBreakdown']['bar'] == {'count': 1, 'available': 0, 'occupied': 0}

    def test_summary_is_for_managers(self, client_for, waiter):
        assert client_for(waiter).get('/api/tables/summary/').status_code == 403

    def test_update_status(self, client_for, waiter, table):
        response = client_for(waiter).patch(f'/api/tables/{table.id}/status/', {'status': 'reserved'})

        assert response.status_code == 200
        assert response.json()['message'] == 'Table status updated successfully'
        table.refresh_from_db()
        assert table.status == Table.STATUS_RESERVED

    def test_update_status_rejects_unknown_value(self, client_for, waiter, table):
        response = client_for(waiter).patch(f'/api/tables/{table.id}/status/', {'status': 'flooded'})
        assert response.status_code == 400


class TestTableQrCode:

    def test_qr_code_links_to_customer_menu(self, client_for, waiter, table, settings):
        settings.PUBLIC_MENU_BASE_URL = 'https://menu.example.com/'

        response = client_for(waiter).get(f'/api/tables/{table.id}/qr/')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['table']['qrCode'] == table.qr_code
        assert data['table']['qrCodeUrl'] == f'https://menu.example.com/?table={table.qr_code}'
        assert data['qrCodeDataUrl'].startswith('data:image/png;base64,')

    def test_qr_code_falls_back_to_request_host(self, client_for, waiter, table, settings):
        settings.PUBLIC_MENU_BASE_URL = ''

        data = client_for(waiter).get(f'/api/tables/{table.id}/qr/').json()['data']

        assert data['table']['qrCodeUrl'] == f'http://testserver/menu/?table={table.qr_code}'

    def test_scan_code_is_stable_across_renders(self, client_for, waiter, table):
        client = client_for(waiter)

        first = client.get(f'/api/tables/{table.id}/qr/').json()['data']
        second = client.get(f'/api/tables/{table.id}/qr/').json()['data']

        assert first['table']['qrCode'] == second['table']['qrCode'] == table.qr_code
