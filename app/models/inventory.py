from datetime import datetime
from app import db
from app.models.base import BaseModel


class InventoryRow(BaseModel):
    """Ledger row: quantities of one asset held at one base"""
    __tablename__ = 'assets'

    asset_type_id = db.Column(db.Integer, db.ForeignKey('asset_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)

    quantity = db.Column(db.Integer, default=0, nullable=False)
    available_quantity = db.Column(db.Integer, default=0, nullable=False)
    assigned_quantity = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.String(20), default='available', nullable=False)  # available | assigned | retired

    # Optimistic concurrency check on every UPDATE
    version = db.Column(db.Integer, nullable=False)

    # Relationships
    asset_type = db.relationship('AssetType', back_populates='inventory_rows')
    base = db.relationship('Base', back_populates='inventory_rows')
    movements = db.relationship('LedgerMovement', back_populates='inventory_row', lazy='dynamic')

    __table_args__ = (
        db.UniqueConstraint('asset_type_id', 'base_id', 'name', name='unique_asset_base_name'),
        db.CheckConstraint('quantity >= 0', name='ck_assets_quantity_non_negative'),
        db.CheckConstraint('available_quantity >= 0', name='ck_assets_available_non_negative'),
        db.CheckConstraint('assigned_quantity >= 0', name='ck_assets_assigned_non_negative'),
        db.CheckConstraint('available_quantity + assigned_quantity <= quantity',
                           name='ck_assets_counters_within_total'),
    )

    __mapper_args__ = {'version_id_col': version}

    def derive_status(self):
        """Status follows the counters"""
        if self.quantity == 0:
            return 'retired'
        if self.available_quantity == 0:
            return 'assigned'
        return 'available'

    def to_dict(self):
        result = super().to_dict()
        result['asset_type_name'] = self.asset_type.name if self.asset_type else None
        result['base_name'] = self.base.name if self.base else None
        return result

    def __repr__(self):
        return (f'<InventoryRow {self.name} Base:{self.base_id} '
                f'Qty:{self.quantity} Avail:{self.available_quantity} Assigned:{self.assigned_quantity}>')


class LedgerMovement(BaseModel):
    """Append-only record of every delta applied to a ledger row"""
    __tablename__ = 'ledger_movements'

    inventory_row_id = db.Column(db.Integer, db.ForeignKey('assets.id', ondelete='SET NULL'))
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    asset_type_id = db.Column(db.Integer, db.ForeignKey('asset_types.id'), nullable=False)
    movement_type = db.Column(db.String(30), nullable=False)  # PURCHASE | TRANSFER_IN | TRANSFER_OUT | EXPENDITURE | ASSIGN | RETURN | WRITE_OFF | ADJUSTMENT
    delta_total = db.Column(db.Integer, default=0, nullable=False)
    delta_available = db.Column(db.Integer, default=0, nullable=False)
    delta_assigned = db.Column(db.Integer, default=0, nullable=False)
    reference_type = db.Column(db.String(30))
    reference_id = db.Column(db.Integer)
    actor_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    movement_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    inventory_row = db.relationship('InventoryRow', back_populates='movements')
    actor = db.relationship('User')

    def __repr__(self):
        return f'<LedgerMovement {self.movement_type} row:{self.inventory_row_id} {self.delta_total:+d}>'


class AssetUnit(BaseModel):
    """Serialized unit created when a purchase of a serialized asset type is approved"""
    __tablename__ = 'asset_units'

    inventory_row_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    purchase_id = db.Column(db.Integer, db.ForeignKey('purchases.id'), nullable=False)
    serial_number = db.Column(db.String(100), unique=True, nullable=False)
    current_value = db.Column(db.Numeric(12, 2))

    # Relationships
    inventory_row = db.relationship('InventoryRow')
    purchase = db.relationship('Purchase', back_populates='units')

    def __repr__(self):
        return f'<AssetUnit {self.serial_number}>'
