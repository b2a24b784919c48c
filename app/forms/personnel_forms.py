from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, Length, Optional


class PersonnelForm(FlaskForm):
    first_name = StringField('First name', validators=[DataRequired(), Length(max=50)])
    last_name = StringField('Last name', validators=[DataRequired(), Length(max=50)])
    rank = StringField('Rank', validators=[DataRequired(), Length(max=50)])
    base_id = IntegerField('Base', validators=[InputRequired()])
    email = StringField('Email', validators=[Optional(), Email(), Length(max=120)])
    phone = StringField('Phone', validators=[Optional(), Length(max=30)])
    department = StringField('Department', validators=[Optional(), Length(max=100)])


class PersonnelUpdateForm(PersonnelForm):
    first_name = StringField('First name', validators=[Optional(), Length(max=50)])
    last_name = StringField('Last name', validators=[Optional(), Length(max=50)])
    rank = StringField('Rank', validators=[Optional(), Length(max=50)])
    base_id = IntegerField('Base', validators=[Optional()])
