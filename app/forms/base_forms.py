from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length, Optional


class BaseSiteForm(FlaskForm):
    """Form for registering a base"""
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    code = StringField('Code', validators=[DataRequired(), Length(max=20)])
    location = StringField('Location', validators=[Optional(), Length(max=255)])
