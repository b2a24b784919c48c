from datetime import datetime, date
from decimal import Decimal
from app import db
from app.models.base import BaseModel


class Purchase(BaseModel):
    """Purchase request; approval materializes stock at the receiving base"""
    __tablename__ = 'purchases'

    STATUSES = ('pending', 'approved', 'cancelled')

    asset_type_id = db.Column(db.Integer, db.ForeignKey('asset_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    asset_name = db.Column(db.String(150), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    supplier = db.Column(db.String(200))
    purchase_date = db.Column(db.Date, default=date.today, nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)
    notes = db.Column(db.Text)

    # Request tracking
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Approval tracking
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)

    cancelled_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    cancelled_at = db.Column(db.DateTime)

    # Ledger row credited on approval
    inventory_row_id = db.Column(db.Integer, db.ForeignKey('assets.id'))

    # Relationships
    asset_type = db.relationship('AssetType')
    base = db.relationship('Base')
    creator = db.relationship('User', foreign_keys=[created_by])
    approver = db.relationship('User', foreign_keys=[approved_by])
    canceller = db.relationship('User', foreign_keys=[cancelled_by])
    inventory_row = db.relationship('InventoryRow')
    units = db.relationship('AssetUnit', back_populates='purchase', cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_purchases_quantity_positive'),
    )

    def recalculate_total(self):
        """total_cost = quantity x unit_cost"""
        self.total_cost = Decimal(self.quantity) * Decimal(str(self.unit_cost or 0))

    def mark_approved(self, user_id):
        self.status = 'approved'
        self.approved_by = user_id
        self.approved_at = datetime.utcnow()

    def to_dict(self):
        result = super().to_dict()
        result['asset_type_name'] = self.asset_type.name if self.asset_type else None
        result['base_name'] = self.base.name if self.base else None
        result['serial_numbers'] = [unit.serial_number for unit in self.units]
        return result

    def __repr__(self):
        return f'<Purchase #{self.id} {self.asset_name} x{self.quantity} {self.status}>'
