"""
Query helper utilities to reduce code duplication
Centralizes common query patterns across the application
"""

from datetime import datetime
from flask import request
from flask_login import current_user
from app.services.exceptions import ValidationError


def get_user_base_query(model_class):
    """
    Get a query filtered by the user's base

    Non-admin users only ever see records of their own base. Admins may
    narrow the list with a ``base_id`` query parameter.

    Args:
        model_class: SQLAlchemy model class with a ``base_id`` column

    Returns:
        SQLAlchemy query object
    """
    query = model_class.query

    if not current_user.is_admin():
        return query.filter(model_class.base_id == current_user.base_id)

    base_id = request.args.get('base_id', type=int)
    if base_id:
        query = query.filter(model_class.base_id == base_id)
    return query


def parse_date_arg(name):
    """Parse a YYYY-MM-DD query parameter, None when absent"""
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{name} must be a date in YYYY-MM-DD format')


def apply_date_range(query, column):
    """Filter by the ``start_date`` / ``end_date`` query parameters, both inclusive"""
    start_date = parse_date_arg('start_date')
    end_date = parse_date_arg('end_date')
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query
