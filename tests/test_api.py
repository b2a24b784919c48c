"""
HTTP surface: authentication, response envelope, pagination, role and base scoping.
"""

import pytest

from app.models import ActivityLog, InventoryRow, Personnel
from app.utils.decorators import role_required


class TestAuth:

    def test_login_with_email_and_me(self, client, seed):
        response = client.post('/api/auth/login', json={'email': 'ca@test.local', 'password': 'commander123'})
        assert response.status_code == 200
        assert response.get_json()['data']['role'] == 'base_commander'

        body = client.get('/api/auth/me').get_json()
        assert body['data']['username'] == 'commander_alpha'
        assert body['data']['base_name'] == 'Fort Alpha'
        assert 'password_hash' not in body['data']

    def test_wrong_password(self, client, seed):
        response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'wrong-password'})

        assert response.status_code == 401
        assert response.get_json() == {
            'success': False,
            'error': 'Invalid credentials',
            'code': 'invalid_credentials'
        }

    def test_missing_identifier_is_a_validation_error(self, client, seed):
        response = client.post('/api/auth/login', json={'password': 'admin123'})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'

    def test_logout_ends_session(self, client, login_as):
        login_as('admin')
        client.post('/api/auth/logout')

        response = client.get('/api/assets/')
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_login_is_audited(self, client, session, login_as):
        login_as('officer_alpha')

        entry = session.query(ActivityLog).filter_by(action='LOGIN_API').one()
        assert entry.username == 'officer_alpha'
        assert entry.ip_address == '127.0.0.1'


class TestEnvelope:

    def test_health(self, client):
        body = client.get('/health').get_json()

        assert body['status'] == 'OK'
        assert body['environment'] == 'testing'

    def test_unauthenticated_request(self, client, seed):
        response = client.get('/api/transfers/')

        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Authentication required'}

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_unknown_record_is_not_found(self, client, login_as):
        login_as('admin')

        response = client.get('/api/assets/9999')

        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Asset not found', 'code': 'not_found'}

    def test_role_mismatch_is_forbidden(self, client, seed, login_as):
        login_as('officer_alpha')

        response = client.post('/api/bases/', json={'name': 'Delta', 'code': 'DELTA'})

        assert response.status_code == 403
        assert response.get_json()['code'] == 'forbidden'


class TestPagination:

    def test_page_and_limit(self, client, seed, make_row, login_as):
        for index in range(5):
            make_row(seed.alpha, seed.ammo, 10, name=f'Lot {index}')
        login_as('admin')

        body = client.get('/api/assets/?page=2&limit=2').get_json()

        assert body['success'] is True
        assert len(body['data']) == 2
        assert body['pagination'] == {'page': 2, 'limit': 2, 'total': 5, 'totalPages': 3}

    def test_limit_is_capped(self, client, seed, login_as):
        login_as('admin')

        body = client.get('/api/users/?limit=1000').get_json()

        assert body['pagination']['limit'] == 100


class TestAssets:

    def test_non_admin_sees_only_their_base(self, client, seed, make_row, login_as):
        make_row(seed.alpha, seed.ammo, 10)
        other = make_row(seed.bravo, seed.ammo, 10)
        login_as('officer_alpha')

        body = client.get('/api/assets/').get_json()
        assert [row['base_id'] for row in body['data']] == [seed.alpha.id]

        response = client.get(f'/api/assets/{other.id}')
        assert response.status_code == 403

    def test_create_row_defaults_available_to_quantity(self, client, seed, login_as):
        login_as('commander_alpha')

        response = client.post('/api/assets/', json={
            'asset_type_id': seed.rifle.id,
            'base_id': seed.alpha.id,
            'name': 'Rifle (reserve)',
            'quantity': 12
        })

        body = response.get_json()['data']
        assert response.status_code == 201
        assert (body['quantity'], body['available_quantity'], body['assigned_quantity']) == (12, 12, 0)
        assert body['status'] == 'available'

    def test_create_row_rejects_counters_above_total(self, client, seed, login_as):
        login_as('admin')

        response = client.post('/api/assets/', json={
            'asset_type_id': seed.rifle.id,
            'base_id': seed.alpha.id,
            'name': 'Rifle',
            'quantity': 10,
            'available_quantity': 8,
            'assigned_quantity': 5
        })

        assert response.status_code == 400
        assert response.get_json()['code'] == 'invariant_violation'

    def test_duplicate_row_is_rejected(self, client, seed, make_row, login_as):
        make_row(seed.alpha, seed.rifle, 10)
        login_as('admin')

        response = client.post('/api/assets/', json={
            'asset_type_id': seed.rifle.id,
            'base_id': seed.alpha.id,
            'name': 'Rifle',
            'quantity': 1
        })

        assert response.status_code == 400

    def test_update_enforces_invariant_strictly(self, client, seed, make_row, login_as, refresh):
        row = make_row(seed.alpha, seed.ammo, 10, available=6, assigned=4)
        login_as('commander_alpha')

        response = client.put(f'/api/assets/{row.id}', json={'available_quantity': 7})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'invariant_violation'

        response = client.put(f'/api/assets/{row.id}', json={'quantity': 20, 'available_quantity': 16})
        assert response.status_code == 200
        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (20, 16, 4)

    def test_assigned_cannot_drop_below_open_assignments(self, client, seed, make_row, login_as, refresh):
        row = make_row(seed.alpha, seed.rifle, 10)
        login_as('admin')
        assignment = client.post('/api/assignments/', json={
            'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id, 'quantity': 5
        }).get_json()['data']

        response = client.put(f'/api/assets/{row.id}', json={'assigned_quantity': 0, 'available_quantity': 10})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'invariant_violation'
        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (10, 5, 5)

        response = client.put(f'/api/assignments/{assignment["id"]}/return', json={})
        assert response.status_code == 200
        assert refresh(row).available_quantity == 10

    def test_movements_history(self, client, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.ammo, 10)
        login_as('admin')
        client.post('/api/expenditures/', json={
            'asset_type_id': seed.ammo.id,
            'base_id': seed.alpha.id,
            'quantity': 3,
            'reason': 'Training'
        })

        body = client.get(f'/api/assets/{row.id}/movements').get_json()

        assert [m['movement_type'] for m in body['data']] == ['EXPENDITURE', 'ADJUSTMENT']

    def test_delete_refused_while_assigned(self, client, session, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 10)
        login_as('admin')
        client.post('/api/assignments/', json={'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id})

        response = client.delete(f'/api/assets/{row.id}')

        assert response.status_code == 400
        assert session.get(InventoryRow, row.id) is not None

    def test_delete_unreferenced_row(self, client, session, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.ammo, 10)
        row_id = row.id
        login_as('admin')

        response = client.delete(f'/api/assets/{row_id}')

        assert response.status_code == 200
        session.expire_all()
        assert session.get(InventoryRow, row_id) is None


class TestReferenceData:

    def test_admin_creates_base_and_asset_type(self, client, login_as):
        login_as('admin')

        response = client.post('/api/bases/', json={'name': 'Delta Station', 'code': 'DELTA'})
        assert response.status_code == 201
        response = client.post('/api/bases/', json={'name': 'Delta Again', 'code': 'DELTA'})
        assert response.status_code == 400

        response = client.post('/api/asset-types/', json={
            'name': 'Night Vision Goggles',
            'category': 'equipment',
            'is_serialized': True
        })
        assert response.status_code == 201
        assert response.get_json()['data']['is_serialized'] is True

    def test_asset_type_in_use_cannot_be_deleted(self, client, seed, make_row, login_as):
        make_row(seed.alpha, seed.ammo, 10)
        login_as('admin')

        response = client.delete(f'/api/asset-types/{seed.ammo.id}')

        assert response.status_code == 400

    def test_commander_adds_personnel_only_to_own_base(self, client, seed, login_as):
        login_as('commander_alpha')

        response = client.post('/api/personnel/', json={
            'first_name': 'Kim', 'last_name': 'Park', 'rank': 'Private', 'base_id': seed.bravo.id
        })
        assert response.status_code == 403

        response = client.post('/api/personnel/', json={
            'first_name': 'Kim', 'last_name': 'Park', 'rank': 'Private', 'base_id': seed.alpha.id,
            'email': 'kim.park@army.mil'
        })
        assert response.status_code == 201

    def test_personnel_with_open_assignment_cannot_be_deleted(self, client, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 10)
        login_as('commander_alpha')
        client.post('/api/assignments/', json={'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id})

        response = client.delete(f'/api/personnel/{seed.soldier_alpha.id}')

        assert response.status_code == 400

    def test_personnel_with_returned_assignment_keeps_history(self, client, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 10)
        login_as('commander_alpha')
        assignment = client.post('/api/assignments/', json={
            'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id
        }).get_json()['data']
        client.put(f'/api/assignments/{assignment["id"]}/return', json={})

        response = client.delete(f'/api/personnel/{seed.soldier_alpha.id}')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Personnel has assignment history and cannot be deleted'

    def test_personnel_holding_assets_cannot_change_base(self, client, session, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 10)
        login_as('admin')
        client.post('/api/assignments/', json={'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id})

        response = client.put(f'/api/personnel/{seed.soldier_alpha.id}', json={'base_id': seed.bravo.id})

        assert response.status_code == 400
        session.expire_all()
        assert session.get(Personnel, seed.soldier_alpha.id).base_id == seed.alpha.id

    def test_personnel_search_is_scoped(self, client, seed, login_as):
        login_as('officer_bravo')

        body = client.get('/api/personnel/?search=Ri').get_json()

        assert [p['last_name'] for p in body['data']] == ['Chen']

    def test_personnel_update_audits_changed_fields(self, client, session, seed, login_as):
        login_as('commander_alpha')

        response = client.put(f'/api/personnel/{seed.soldier_alpha.id}', json={
            'rank': 'Staff Sergeant', 'last_name': 'Hale'
        })

        assert response.status_code == 200
        assert response.get_json()['data']['rank'] == 'Staff Sergeant'
        entry = session.query(ActivityLog).filter_by(action='PERSONNEL_UPDATED').one()
        assert entry.new_data == {'rank': 'Staff Sergeant'}


class TestAccessControl:

    def test_unknown_role_is_rejected_when_decorating(self):
        with pytest.raises(ValueError):
            role_required('admin', 'quartermaster')

    def test_officer_cannot_write_off_through_api(self, client, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 5)
        login_as('officer_alpha')
        assignment = client.post('/api/assignments/', json={
            'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id
        }).get_json()['data']

        response = client.put(f'/api/assignments/{assignment["id"]}/write-off', json={'status': 'lost'})

        assert response.status_code == 403
        assert response.get_json()['code'] == 'forbidden'


class TestAudit:

    def test_dates_are_stored_as_iso_strings(self, client, session, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 5)
        login_as('commander_alpha')
        assignment = client.post('/api/assignments/', json={
            'asset_id': row.id, 'personnel_id': seed.soldier_alpha.id
        }).get_json()['data']

        response = client.put(f'/api/assignments/{assignment["id"]}', json={
            'expected_return_date': '2026-12-01'
        })

        assert response.status_code == 200
        entry = session.query(ActivityLog).filter_by(action='ASSIGNMENT_UPDATED').one()
        assert entry.new_data == {'expected_return_date': '2026-12-01'}
