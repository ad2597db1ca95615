"""
Authentication forms using Flask-WTF.
Accept form-encoded or JSON bodies; CSRF protection applies to both.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length, EqualTo, Optional, Regexp, ValidationError

from utils.validators import validate_email as is_valid_email, validate_phone as is_valid_phone


class LoginForm(FlaskForm):
    """Login form with username and password."""

    username = StringField('Username', validators=[
        DataRequired(message='Username harus diisi')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password harus diisi')
    ])

    remember_me = BooleanField('Ingat saya')


class ChangePasswordForm(FlaskForm):
    """Password change form."""

    current_password = PasswordField('Password Saat Ini', validators=[
        DataRequired(message='Password saat ini harus diisi')
    ])

    new_password = PasswordField('Password Baru', validators=[
        DataRequired(message='Password baru harus diisi'),
        Length(min=6, message='Password minimal 6 karakter'),
    ])

    confirm_password = PasswordField('Konfirmasi Password', validators=[
        DataRequired(message='Konfirmasi password harus diisi'),
        EqualTo('new_password', message='Konfirmasi password tidak cocok')
    ])


class EmailPhoneMixin:
    """Inline email and phone format checks shared by account forms."""

    def validate_email(self, field):
        if field.data and not is_valid_email(field.data.strip()):
            raise ValidationError('Format email tidak valid')

    def validate_phone(self, field):
        if field.data and not is_valid_phone(field.data):
            raise ValidationError('Format nomor telepon tidak valid')


class RegisterForm(EmailPhoneMixin, FlaskForm):
    """Self-registration form for requesters."""

    username = StringField('Username', validators=[
        DataRequired(message='Username harus diisi'),
        Regexp(r'^[A-Za-z0-9_.]{3,30}$',
               message='Username 3-30 karakter: huruf, angka, titik atau garis bawah')
    ])

    email = StringField('Email', validators=[
        DataRequired(message='Email harus diisi'),
        Length(max=100)
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password harus diisi'),
        Length(min=6, message='Password minimal 6 karakter'),
    ])

    confirm_password = PasswordField('Konfirmasi Password', validators=[
        DataRequired(message='Konfirmasi password harus diisi'),
        EqualTo('password', message='Konfirmasi password tidak cocok')
    ])

    full_name = StringField('Nama Lengkap', validators=[
        DataRequired(message='Nama lengkap harus diisi'),
        Length(max=100)
    ])

    institution = StringField('Instansi', validators=[Optional(), Length(max=100)])

    phone = StringField('Nomor Telepon', validators=[Optional(), Length(max=20)])


class ProfileForm(EmailPhoneMixin, FlaskForm):
    """Profile editing form; absent fields are left unchanged."""

    email = StringField('Email', validators=[Optional(), Length(max=100)])

    full_name = StringField('Nama Lengkap', validators=[Optional(), Length(max=100)])

    institution = StringField('Instansi', validators=[Optional(), Length(max=100)])

    phone = StringField('Nomor Telepon', validators=[Optional(), Length(max=20)])
