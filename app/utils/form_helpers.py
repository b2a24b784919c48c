"""
Run WTForms validation over JSON request bodies.

Scalars from the JSON object are turned into form data strings so the
regular field coercion (IntegerField, DateField, DecimalField...) applies,
and a failed validation becomes a ``ValidationError`` carrying the
per-field messages.
"""

from flask import request
from werkzeug.datastructures import MultiDict
from app.services.exceptions import ValidationError


def json_formdata():
    """Get request JSON as a MultiDict of strings"""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    formdata = MultiDict()
    for key, value in payload.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        formdata.add(key, str(value))
    return formdata


def validate_json(form_class, **kwargs):
    """Build ``form_class`` from the JSON body and validate it"""
    form = form_class(formdata=json_formdata(), **kwargs)
    if not form.validate():
        field, messages = next(iter(form.errors.items()))
        label = form[field].label.text if field in form else field
        raise ValidationError(f'{label}: {messages[0]}', errors=form.errors)
    return form


def provided(form, field_name):
    """True when the request body carried a value for the field"""
    return bool(form[field_name].raw_data)


def provided_data(form):
    """Data of the fields the request body carried, keyed by field name"""
    return {field.name: field.data for field in form if field.raw_data}
