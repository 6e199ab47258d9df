# users/forms.py
from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
import re

User = get_user_model()


class RegisterForm(forms.Form):
    first_name = forms.CharField(max_length=50, required=True)
    last_name = forms.CharField(max_length=50, required=True)
    email = forms.EmailField(required=True)
    phone = forms.CharField(required=False)
    password = forms.CharField(min_length=6, max_length=100, required=True)

    # ---------- Field validations ----------

    def clean_first_name(self):
        name = self.cleaned_data["first_name"].strip()
        if not name:
            raise ValidationError("First name is required")
        return name

    def clean_last_name(self):
        name = self.cleaned_data["last_name"].strip()
        if not name:
            raise ValidationError("Last name is required")
        return name

    def clean_email(self):
        email = self.cleaned_data["email"].lower().strip()
        if User.objects.filter(email=email).exists():
            raise ValidationError("This email is already registered")
        return email

    def clean_phone(self):
        phone = (self.cleaned_data.get("phone") or "").strip()
        if phone and not re.match(r"^\+?[0-9][0-9 \-]{6,19}$", phone):
            raise ValidationError("Enter a valid phone number")
        return phone

    def clean_password(self):
        password = self.cleaned_data.get("password")
        validate_password(password)
        return password


class ProfileForm(forms.ModelForm):
    shipping_address = forms.JSONField(required=False)
    billing_address = forms.JSONField(required=False)

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'phone', 'avatar', 'shipping_address', 'billing_address']

    def clean_shipping_address(self):
        return _clean_address(self.cleaned_data.get('shipping_address'))

    def clean_billing_address(self):
        return _clean_address(self.cleaned_data.get('billing_address'))


def _clean_address(value):
    if value in (None, ''):
        return None
    if not isinstance(value, dict):
        raise ValidationError("Address must be an object")
    return value
