from datetime import datetime
from flask import has_request_context, request
from app import db
from app.models.base import BaseModel


class ActivityLog(BaseModel):
    """Audit trail of every state-changing action"""
    __tablename__ = 'activity_logs'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    username = db.Column(db.String(100))
    action = db.Column(db.String(50), nullable=False, index=True)  # TRANSFER_APPROVED, LOGIN_API, ...
    table_name = db.Column(db.String(50), nullable=False)
    record_id = db.Column(db.Integer)
    old_data = db.Column(db.JSON)
    new_data = db.Column(db.JSON)
    ip_address = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User')

    @classmethod
    def _snapshot(cls, data):
        if data is None:
            return None
        if isinstance(data, dict):
            return {key: cls._snapshot(value) for key, value in data.items()}
        if isinstance(data, (list, tuple)):
            return [cls._snapshot(value) for value in data]
        return cls.serialize(data)

    @classmethod
    def log_activity(cls, session, user, action, table_name, record_id=None, old_data=None, new_data=None):
        """
        Add an entry to ``session``, the unit of work of the change it
        describes, so both are committed or rolled back together. Dates and
        decimals in the payloads are stored in their JSON form.
        """
        log = cls(
            user_id=user.id if user else None,
            username=user.username if user else 'System',
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_data=cls._snapshot(old_data),
            new_data=cls._snapshot(new_data),
            ip_address=request.remote_addr if has_request_context() else None
        )
        session.add(log)
        return log

    def __repr__(self):
        return f'<ActivityLog {self.action} {self.table_name}#{self.record_id}>'
