from django import forms
from django.core.exceptions import ValidationError

from .models import Coupon, TodaysDeal


class CouponForm(forms.ModelForm):
    class Meta:
        model = Coupon
        fields = [
            'code', 'description', 'discount_type', 'discount_value',
            'min_order_amount', 'max_discount', 'usage_limit',
            'valid_from', 'valid_until', 'is_active',
        ]

    def clean_code(self):
        code = (self.cleaned_data.get('code') or '').strip().upper()
        if not code:
            raise ValidationError("Coupon code is required")
        return code

    def clean(self):
        cleaned = super().clean()
        valid_from = cleaned.get('valid_from')
        valid_until = cleaned.get('valid_until')
        if valid_from and valid_until and valid_until < valid_from:
            raise ValidationError("valid_until must not be before valid_from")
        if cleaned.get('min_order_amount') is None:
            cleaned['min_order_amount'] = 0
        return cleaned


class DealForm(forms.ModelForm):
    class Meta:
        model = TodaysDeal
        fields = ['product', 'discount', 'start_time', 'end_time', 'is_active']

    def clean(self):
        cleaned = super().clean()
        start_time = cleaned.get('start_time')
        end_time = cleaned.get('end_time')
        if start_time and end_time and end_time <= start_time:
            raise ValidationError("end_time must be after start_time")
        return cleaned
