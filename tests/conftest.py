"""
Pytest fixtures for the asset management test suite.

Provides:
- An application built with the testing config on in-memory SQLite
- Seeded bases, users for each role, asset types and personnel
- Helpers for creating ledger rows and logging in through the API
"""

from types import SimpleNamespace

import pytest

from app import create_app, db
from app.models import AssetType, Base, InventoryRow, Personnel, User
from app.services.ledger import InventoryLedger, unit_of_work

PASSWORDS = {
    'admin': 'admin123',
    'commander_alpha': 'commander123',
    'officer_alpha': 'officer123',
    'commander_bravo': 'commander123',
    'officer_bravo': 'officer123',
}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def seed(session):
    """Three bases, one user per role, two asset types and a service member per base"""
    with unit_of_work(session):
        alpha = Base(name='Fort Alpha', code='ALPHA', location='North')
        bravo = Base(name='Camp Bravo', code='BRAVO', location='East')
        charlie = Base(name='Outpost Charlie', code='CHARLIE', location='South')
        session.add_all([alpha, bravo, charlie])
        session.flush()

        users = {
            'admin': User(username='admin', email='admin@test.local', first_name='Ada',
                          last_name='Admin', role='admin'),
            'commander_alpha': User(username='commander_alpha', email='ca@test.local', first_name='Cal',
                                    last_name='Alpha', role='base_commander', base_id=alpha.id),
            'officer_alpha': User(username='officer_alpha', email='oa@test.local', first_name='Oli',
                                  last_name='Alpha', role='logistics_officer', base_id=alpha.id),
            'commander_bravo': User(username='commander_bravo', email='cb@test.local', first_name='Cam',
                                    last_name='Bravo', role='base_commander', base_id=bravo.id),
            'officer_bravo': User(username='officer_bravo', email='ob@test.local', first_name='Oz',
                                  last_name='Bravo', role='logistics_officer', base_id=bravo.id),
        }
        for key, user in users.items():
            user.set_password(PASSWORDS[key])
        session.add_all(users.values())

        rifle = AssetType(name='Rifle', category='weapon', code='RFL', is_serialized=True)
        ammo = AssetType(name='Ammunition', category='ammunition', unit_of_measure='round')
        session.add_all([rifle, ammo])

        soldier_alpha = Personnel(first_name='Jo', last_name='Hale', rank='Sergeant', base_id=alpha.id)
        soldier_bravo = Personnel(first_name='Ri', last_name='Chen', rank='Corporal', base_id=bravo.id)
        session.add_all([soldier_alpha, soldier_bravo])

    return SimpleNamespace(
        alpha=alpha, bravo=bravo, charlie=charlie,
        rifle=rifle, ammo=ammo,
        soldier_alpha=soldier_alpha, soldier_bravo=soldier_bravo,
        **users
    )


@pytest.fixture
def make_row(session, seed):
    """Create a ledger row with the given counters"""
    def _make_row(base, asset_type, quantity, available=None, assigned=0, name=None):
        available = quantity - assigned if available is None else available
        with unit_of_work(session):
            ledger = InventoryLedger(session, actor_id=seed.admin.id)
            row = ledger.get_or_create_row(base.id, asset_type.id, name or asset_type.name)
            ledger.apply_delta(row, delta_total=quantity, delta_available=available,
                               delta_assigned=assigned, movement_type='ADJUSTMENT')
        return row
    return _make_row


@pytest.fixture
def login_as(client, seed):
    """Log the test client in as one of the seeded users"""
    def _login_as(key):
        response = client.post('/api/auth/login', json={
            'username': key,
            'password': PASSWORDS[key]
        })
        assert response.status_code == 200, response.get_json()
        return getattr(seed, key)
    return _login_as


@pytest.fixture
def refresh(session):
    """Re-read a ledger row from the database"""
    def _refresh(row):
        session.expire_all()
        return session.get(InventoryRow, row.id)
    return _refresh
