"""
Forms for assigning assets to personnel and taking them back
"""
from flask_wtf import FlaskForm
from wtforms import DateField, IntegerField, SelectField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, NumberRange, Optional


class AssignmentForm(FlaskForm):
    asset_id = IntegerField('Asset', validators=[InputRequired()])
    personnel_id = IntegerField('Personnel', validators=[InputRequired()])
    quantity = IntegerField('Quantity', default=1, validators=[Optional(), NumberRange(min=1, message='Quantity must be greater than 0')])
    assignment_date = DateField('Assignment date', format='%Y-%m-%d', validators=[Optional()])
    expected_return_date = DateField('Expected return date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class AssignmentReturnForm(FlaskForm):
    """Full return when no quantity is given"""
    return_quantity = IntegerField('Return quantity', validators=[Optional(), NumberRange(min=1, message='Return quantity must be greater than 0')])
    return_date = DateField('Return date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class AssignmentWriteOffForm(FlaskForm):
    status = SelectField('Status', choices=[
        ('lost', 'Lost'),
        ('damaged', 'Damaged')
    ], validators=[DataRequired()])
    notes = TextAreaField('Notes', validators=[Optional()])


class AssignmentUpdateForm(FlaskForm):
    assignment_date = DateField('Assignment date', format='%Y-%m-%d', validators=[Optional()])
    expected_return_date = DateField('Expected return date', format='%Y-%m-%d', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
