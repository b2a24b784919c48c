from datetime import date
from app import db
from app.models.base import BaseModel


class Assignment(BaseModel):
    """Quantity of a ledger row checked out to a service member"""
    __tablename__ = 'assignments'

    STATUSES = ('active', 'partially_returned', 'returned', 'lost', 'damaged')
    OPEN_STATUSES = ('active', 'partially_returned')

    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    personnel_id = db.Column(db.Integer, db.ForeignKey('personnel.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    assigned_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    assignment_date = db.Column(db.Date, default=date.today, nullable=False)
    expected_return_date = db.Column(db.Date)
    return_date = db.Column(db.Date)
    status = db.Column(db.String(20), default='active', nullable=False)
    quantity = db.Column(db.Integer, default=1, nullable=False)
    returned_quantity = db.Column(db.Integer, default=0, nullable=False)
    written_off_quantity = db.Column(db.Integer, default=0, nullable=False)
    notes = db.Column(db.Text)

    # Relationships
    asset = db.relationship('InventoryRow')
    personnel = db.relationship('Personnel', back_populates='assignments')
    base = db.relationship('Base')
    assigner = db.relationship('User')

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_assignments_quantity_positive'),
        db.CheckConstraint('returned_quantity >= 0', name='ck_assignments_returned_non_negative'),
        db.CheckConstraint('returned_quantity + written_off_quantity <= quantity',
                           name='ck_assignments_returned_within_quantity'),
    )

    @property
    def outstanding_quantity(self):
        """Quantity still held by the service member"""
        return self.quantity - self.returned_quantity - self.written_off_quantity

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    def to_dict(self):
        result = super().to_dict()
        result['outstanding_quantity'] = self.outstanding_quantity
        result['asset_name'] = self.asset.name if self.asset else None
        result['personnel_name'] = self.personnel.full_name if self.personnel else None
        return result

    def __repr__(self):
        return f'<Assignment #{self.id} asset:{self.asset_id} x{self.quantity} {self.status}>'
