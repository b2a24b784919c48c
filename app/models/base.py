from datetime import datetime, date
from decimal import Decimal
from app import db


class BaseModel(db.Model):
    """Common columns, field updates and JSON serialization"""
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def apply_changes(self, changes, fields):
        """Copy the whitelisted keys of ``changes`` onto the model, returns the fields that changed"""
        changed = {}
        for field in fields:
            if field in changes and getattr(self, field) != changes[field]:
                changed[field] = changes[field]
                setattr(self, field, changes[field])
        return changed

    @staticmethod
    def serialize(value):
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, Decimal):
            return float(value)
        return value

    def to_dict(self):
        """Convert model columns to a JSON-ready dictionary"""
        return {
            column.name: self.serialize(getattr(self, column.name))
            for column in self.__table__.columns
        }

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.id}>"
