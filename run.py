import os
from app import create_app, db
from app.models import User, Base, AssetType, InventoryRow, Personnel

# Create app instance
app = create_app(os.getenv('FLASK_ENV', 'development'))


@app.shell_context_processor
def make_shell_context():
    """Make database models available in Flask shell"""
    return {
        'db': db,
        'User': User,
        'Base': Base,
        'AssetType': AssetType,
        'InventoryRow': InventoryRow
    }


@app.cli.command()
def init_db():
    """Initialize the database with sample data"""
    from app.services.ledger import InventoryLedger, unit_of_work

    print("Creating database tables...")
    db.create_all()

    # Check if data already exists
    if User.query.first():
        print("Database already initialized!")
        return

    print("Creating sample data...")

    with unit_of_work(db.session):
        alpha = Base(name='Fort Alpha', code='ALPHA', location='Northern Sector')
        bravo = Base(name='Camp Bravo', code='BRAVO', location='Eastern Sector')
        db.session.add_all([alpha, bravo])
        db.session.flush()

        admin = User(username='admin', email='admin@mams.local',
                     first_name='System', last_name='Admin', role='admin')
        admin.set_password('admin123')

        commander = User(username='commander.alpha', email='commander.alpha@mams.local',
                         first_name='Alex', last_name='Reyes', role='base_commander', base_id=alpha.id)
        commander.set_password('commander123')

        officer = User(username='logistics.bravo', email='logistics.bravo@mams.local',
                       first_name='Sam', last_name='Okafor', role='logistics_officer', base_id=bravo.id)
        officer.set_password('logistics123')
        db.session.add_all([admin, commander, officer])

        rifle = AssetType(name='M4 Carbine', category='weapon', code='M4', is_serialized=True,
                          description='Standard issue carbine')
        truck = AssetType(name='Utility Truck', category='vehicle', code='TRK', is_serialized=True)
        ammo = AssetType(name='5.56mm Ammunition', category='ammunition', unit_of_measure='round')
        db.session.add_all([rifle, truck, ammo])
        db.session.flush()

        db.session.add_all([
            Personnel(first_name='Jordan', last_name='Hale', rank='Sergeant', base_id=alpha.id,
                      email='jordan.hale@mams.local', department='Infantry'),
            Personnel(first_name='Riley', last_name='Chen', rank='Corporal', base_id=bravo.id,
                      email='riley.chen@mams.local', department='Logistics'),
        ])

        ledger = InventoryLedger(db.session, actor_id=admin.id)
        for base, asset_type, quantity in (
            (alpha, rifle, 120),
            (alpha, ammo, 50000),
            (bravo, rifle, 40),
            (bravo, truck, 12),
        ):
            row = ledger.get_or_create_row(base.id, asset_type.id, asset_type.name)
            ledger.apply_delta(row, delta_total=quantity, delta_available=quantity,
                               movement_type='ADJUSTMENT', reference_type='seed')

    print("Database initialized successfully!")
    print("Login credentials:")
    print("Admin: admin / admin123")
    print("Base Commander (Fort Alpha): commander.alpha / commander123")
    print("Logistics Officer (Camp Bravo): logistics.bravo / logistics123")


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
