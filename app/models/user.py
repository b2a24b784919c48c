from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from app import db
from app.models.base import BaseModel

ROLES = ('admin', 'base_commander', 'logistics_officer')


class User(UserMixin, BaseModel):
    """User model for authentication and authorization"""
    __tablename__ = 'users'

    username = db.Column(db.String(50), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    role = db.Column(db.String(30), nullable=False)  # admin | base_commander | logistics_officer
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'))  # Not set for admin
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    base = db.relationship('Base', back_populates='users')

    @property
    def name(self):
        return f'{self.first_name} {self.last_name}'

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        """Check if user is admin"""
        return self.role == 'admin'

    def is_base_commander(self):
        return self.role == 'base_commander'

    def has_base_access(self, base_id):
        """Admins see every base, everyone else only their own"""
        if self.is_admin():
            return True
        return self.base_id is not None and self.base_id == base_id

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'role': self.role,
            'base_id': self.base_id,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<User {self.username} - {self.role}>'
