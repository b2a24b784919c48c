from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Length, Optional


class LoginForm(FlaskForm):
    """Login with either username or email"""
    username = StringField('Username', validators=[Optional(), Length(max=120)])
    email = StringField('Email', validators=[Optional(), Length(max=120)])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6)])

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if not (self.username.data or self.email.data):
            self.username.errors.append('Username or email is required')
            return False
        return True

    @property
    def identifier(self):
        return (self.username.data or self.email.data).strip()
