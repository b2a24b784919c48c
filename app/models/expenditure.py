from datetime import date
from app import db
from app.models.base import BaseModel


class Expenditure(BaseModel):
    """Stock consumed or written off at a base"""
    __tablename__ = 'expenditures'

    asset_type_id = db.Column(db.Integer, db.ForeignKey('asset_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    expenditure_date = db.Column(db.Date, default=date.today, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Relationships
    asset_type = db.relationship('AssetType')
    base = db.relationship('Base')
    creator = db.relationship('User')

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_expenditures_quantity_positive'),
    )

    def to_dict(self):
        result = super().to_dict()
        result['asset_type_name'] = self.asset_type.name if self.asset_type else None
        result['base_name'] = self.base.name if self.base else None
        return result

    def __repr__(self):
        return f'<Expenditure #{self.id} type:{self.asset_type_id} base:{self.base_id} x{self.quantity}>'
