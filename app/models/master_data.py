from app import db
from app.models.base import BaseModel


class Base(BaseModel):
    """A military base, owns its own ledger rows, personnel and users"""
    __tablename__ = 'bases'

    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), nullable=False, unique=True)
    location = db.Column(db.String(255))

    # Relationships
    inventory_rows = db.relationship('InventoryRow', back_populates='base', lazy='dynamic')
    personnel = db.relationship('Personnel', back_populates='base', lazy='dynamic')
    users = db.relationship('User', back_populates='base')

    def __repr__(self):
        return f'<Base {self.code} {self.name}>'


class AssetType(BaseModel):
    """Catalogue entry for a kind of asset (weapon, vehicle, ammunition...)"""
    __tablename__ = 'asset_types'

    name = db.Column(db.String(100), nullable=False, unique=True)
    category = db.Column(db.String(50), nullable=False)  # weapon | vehicle | ammunition | equipment
    description = db.Column(db.Text)
    unit_of_measure = db.Column(db.String(20), default='unit', nullable=False)
    code = db.Column(db.String(20))  # Prefix for generated serial numbers
    is_serialized = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    inventory_rows = db.relationship('InventoryRow', back_populates='asset_type', lazy='dynamic')

    @property
    def serial_prefix(self):
        return (self.code or self.name[:3]).upper()

    @property
    def total_quantity(self):
        """Get total quantity across all bases"""
        from app.models.inventory import InventoryRow
        result = db.session.query(db.func.sum(InventoryRow.quantity)).filter(
            InventoryRow.asset_type_id == self.id
        ).scalar()
        return result or 0

    def __repr__(self):
        return f'<AssetType {self.name} ({self.category})>'
