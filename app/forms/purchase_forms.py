from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, DecimalField, IntegerField, StringField, TextAreaField
from wtforms.validators import InputRequired, Length, NumberRange, Optional


class PurchaseForm(FlaskForm):
    """Purchase request"""
    asset_type_id = IntegerField('Asset type', validators=[InputRequired()])
    base_id = IntegerField('Base', validators=[InputRequired()])
    asset_name = StringField('Asset name', validators=[Optional(), Length(max=150)])
    quantity = IntegerField('Quantity', validators=[InputRequired(), NumberRange(min=1, message='Quantity must be greater than 0')])
    unit_cost = DecimalField('Unit cost', places=2, validators=[InputRequired(), NumberRange(min=0, message='Unit cost cannot be negative')])
    supplier = StringField('Supplier', validators=[Optional(), Length(max=200)])
    purchase_date = DateField('Purchase date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
    auto_approve = BooleanField('Approve immediately')


class PurchaseUpdateForm(FlaskForm):
    """Changes to a purchase that is still pending"""
    quantity = IntegerField('Quantity', validators=[Optional(), NumberRange(min=1, message='Quantity must be greater than 0')])
    unit_cost = DecimalField('Unit cost', places=2, validators=[Optional(), NumberRange(min=0, message='Unit cost cannot be negative')])
    supplier = StringField('Supplier', validators=[Optional(), Length(max=200)])
    purchase_date = DateField('Purchase date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
