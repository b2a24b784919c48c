"""
Transfer Model - stock moved from one base's ledger row to another's
"""
from datetime import datetime, date
from app import db
from app.models.base import BaseModel


class Transfer(BaseModel):
    """Inter-base transfer request and its approval trail"""
    __tablename__ = 'transfers'

    STATUSES = ('pending', 'approved', 'rejected', 'completed', 'cancelled')

    transfer_number = db.Column(db.String(50), unique=True, nullable=False)

    from_base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    to_base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    asset_type_id = db.Column(db.Integer, db.ForeignKey('asset_types.id'), nullable=False)
    asset_name = db.Column(db.String(150), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    transfer_date = db.Column(db.Date, default=date.today, nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)
    notes = db.Column(db.Text)

    # Request tracking
    requested_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Approval tracking
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)

    # Rejection tracking
    rejected_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    rejected_at = db.Column(db.DateTime)

    completed_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)

    # Relationships
    from_base = db.relationship('Base', foreign_keys=[from_base_id])
    to_base = db.relationship('Base', foreign_keys=[to_base_id])
    asset_type = db.relationship('AssetType')
    requester = db.relationship('User', foreign_keys=[requested_by])
    approver = db.relationship('User', foreign_keys=[approved_by])
    rejecter = db.relationship('User', foreign_keys=[rejected_by])

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_transfers_quantity_positive'),
    )

    def involves_base(self, base_id):
        return base_id is not None and base_id in (self.from_base_id, self.to_base_id)

    def mark_approved(self, user_id):
        self.status = 'approved'
        self.approved_by = user_id
        self.approved_at = datetime.utcnow()

    def mark_rejected(self, user_id, notes=None):
        self.status = 'rejected'
        self.rejected_by = user_id
        self.rejected_at = datetime.utcnow()
        if notes:
            self.notes = notes

    def to_dict(self):
        result = super().to_dict()
        result['from_base_name'] = self.from_base.name if self.from_base else None
        result['to_base_name'] = self.to_base.name if self.to_base else None
        result['asset_type_name'] = self.asset_type.name if self.asset_type else None
        return result

    def __repr__(self):
        return f'<Transfer {self.transfer_number}: {self.from_base_id} -> {self.to_base_id} x{self.quantity} {self.status}>'
