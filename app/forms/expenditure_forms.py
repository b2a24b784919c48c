from flask_wtf import FlaskForm
from wtforms import DateField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional


class ExpenditureForm(FlaskForm):
    asset_type_id = IntegerField('Asset type', validators=[InputRequired()])
    base_id = IntegerField('Base', validators=[InputRequired()])
    quantity = IntegerField('Quantity', validators=[InputRequired(), NumberRange(min=1, message='Quantity must be greater than 0')])
    reason = StringField('Reason', validators=[DataRequired(), Length(max=255)])
    expenditure_date = DateField('Expenditure date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class ExpenditureUpdateForm(FlaskForm):
    """Descriptive fields only"""
    reason = StringField('Reason', validators=[Optional(), Length(max=255)])
    expenditure_date = DateField('Expenditure date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
