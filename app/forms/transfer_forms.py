"""
Forms for inter-base transfers
"""
from flask_wtf import FlaskForm
from wtforms import DateField, IntegerField, StringField, TextAreaField
from wtforms.validators import InputRequired, Length, NumberRange, Optional


class TransferForm(FlaskForm):
    """Transfer request"""
    from_base_id = IntegerField('Source base', validators=[InputRequired()])
    to_base_id = IntegerField('Destination base', validators=[InputRequired()])
    asset_type_id = IntegerField('Asset type', validators=[InputRequired()])
    asset_name = StringField('Asset name', validators=[Optional(), Length(max=150)])
    quantity = IntegerField('Quantity', validators=[InputRequired(), NumberRange(min=1, message='Quantity must be greater than 0')])
    transfer_date = DateField('Transfer date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class TransferRejectForm(FlaskForm):
    notes = TextAreaField('Notes', validators=[Optional()])
