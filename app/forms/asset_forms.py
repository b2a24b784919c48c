from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

CATEGORY_CHOICES = [
    ('weapon', 'Weapon'),
    ('vehicle', 'Vehicle'),
    ('ammunition', 'Ammunition'),
    ('equipment', 'Equipment'),
]


class AssetTypeForm(FlaskForm):
    """Form for asset type catalogue entries"""
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    category = SelectField('Category', choices=CATEGORY_CHOICES, validators=[DataRequired()])
    description = TextAreaField('Description', validators=[Optional()])
    unit_of_measure = StringField('Unit of measure', validators=[Optional(), Length(max=20)])
    code = StringField('Code', validators=[Optional(), Length(max=20)])
    is_serialized = BooleanField('Serialized')


class AssetTypeUpdateForm(AssetTypeForm):
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    category = SelectField('Category', choices=CATEGORY_CHOICES, validators=[Optional()])


class AssetForm(FlaskForm):
    """Explicit ledger row creation"""
    asset_type_id = IntegerField('Asset type', validators=[InputRequired()])
    base_id = IntegerField('Base', validators=[InputRequired()])
    name = StringField('Name', validators=[DataRequired(), Length(max=150)])
    description = TextAreaField('Description', validators=[Optional()])
    quantity = IntegerField('Quantity', validators=[InputRequired(), NumberRange(min=0)])
    available_quantity = IntegerField('Available quantity', validators=[Optional(), NumberRange(min=0)])
    assigned_quantity = IntegerField('Assigned quantity', validators=[Optional(), NumberRange(min=0)])


class AssetUpdateForm(FlaskForm):
    """Metadata edits and counter corrections"""
    name = StringField('Name', validators=[Optional(), Length(max=150)])
    description = TextAreaField('Description', validators=[Optional()])
    quantity = IntegerField('Quantity', validators=[Optional(), NumberRange(min=0)])
    available_quantity = IntegerField('Available quantity', validators=[Optional(), NumberRange(min=0)])
    assigned_quantity = IntegerField('Assigned quantity', validators=[Optional(), NumberRange(min=0)])
