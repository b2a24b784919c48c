from app import db
from app.models.base import BaseModel


class Personnel(BaseModel):
    """Service member that assets can be assigned to"""
    __tablename__ = 'personnel'

    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    rank = db.Column(db.String(50), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    email = db.Column(db.String(120), unique=True)
    phone = db.Column(db.String(30))
    department = db.Column(db.String(100))

    # Relationships
    base = db.relationship('Base', back_populates='personnel')
    assignments = db.relationship('Assignment', back_populates='personnel', lazy='dynamic')

    @property
    def full_name(self):
        return f'{self.rank} {self.first_name} {self.last_name}'

    def has_outstanding_assignments(self):
        from app.models.assignment import Assignment
        return self.assignments.filter(Assignment.status.in_(Assignment.OPEN_STATUSES)).count() > 0

    def to_dict(self):
        result = super().to_dict()
        result['base_name'] = self.base.name if self.base else None
        return result

    def __repr__(self):
        return f'<Personnel {self.full_name}>'
