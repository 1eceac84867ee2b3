from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField, SelectField
from wtforms.validators import DataRequired, Length, Email, EqualTo, Regexp

from .models import Role


class LoginForm(FlaskForm):
    identifier = StringField("Username or email", validators=[
        DataRequired(message="Please enter your username or email."), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired(message="Please enter your password.")])
    submit = SubmitField("Log in")


class RegisterForm(FlaskForm):
    username = StringField("Username", validators=[
        DataRequired(message="Please choose a username."),
        Length(min=3, max=20, message="Username must be between 3 and 20 characters."),
        Regexp(r"^[A-Za-z0-9_]+$", message="Username may only contain letters, digits and underscores."),
    ])
    email = StringField("Email", validators=[
        DataRequired(message="Please enter your email address."),
        Email(message="Please enter a valid email address."),
        Length(max=255),
    ])
    password = PasswordField("Password", validators=[
        DataRequired(message="Please choose a password."),
        Length(min=8, message="Password must be at least 8 characters."),
    ])
    confirm_password = PasswordField("Confirm password", validators=[
        DataRequired(message="Please confirm your password."),
        EqualTo("password", message="Passwords do not match."),
    ])
    submit = SubmitField("Register")


class DeleteAccountForm(FlaskForm):
    password = PasswordField("Current password", validators=[DataRequired(message="Please enter your password.")])
    submit = SubmitField("Delete my account")


class RoleForm(FlaskForm):
    role = SelectField("Role", choices=[(r.value, r.value) for r in Role])
    submit = SubmitField("Save")
