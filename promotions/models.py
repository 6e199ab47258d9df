# promotions/models.py
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db.models import Q
from django.utils import timezone


class CouponQuerySet(models.QuerySet):
    def usable(self, now=None):
        """Active, inside the usage window and not exhausted."""
        now = now or timezone.now()
        return self.filter(
            is_active=True,
            valid_from__lte=now,
            valid_until__gte=now,
        ).filter(
            Q(usage_limit__isnull=True) | Q(used_count__lt=models.F('usage_limit'))
        )


class Coupon(models.Model):
    """Discount coupons"""
    DISCOUNT_TYPES = [
        ('percentage', 'Percentage'),
        ('fixed', 'Fixed Amount'),
    ]

    code = models.CharField(max_length=50, unique=True, db_index=True)
    description = models.TextField(blank=True)

    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPES)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    # Conditions
    min_order_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0,
                                           validators=[MinValueValidator(0)])
    max_discount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
                                       validators=[MinValueValidator(0)])

    # Limitations
    usage_limit = models.PositiveIntegerField(null=True, blank=True)  # Total uses
    used_count = models.PositiveIntegerField(default=0)

    # Validity, both ends inclusive
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CouponQuerySet.as_manager()

    class Meta:
        db_table = 'coupons'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'valid_from', 'valid_until']),
        ]

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_exhausted(self):
        return self.usage_limit is not None and self.used_count >= self.usage_limit


class CouponUsage(models.Model):
    """Track coupon usage"""
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name='usage_records')
    order = models.ForeignKey('orders.Order', on_delete=models.CASCADE, related_name='coupon_usage')
    user = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='coupon_usage')

    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'coupon_usage'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['coupon', 'user']),
        ]


class TodaysDeal(models.Model):
    """Time-boxed percentage deal on a single product"""
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='deals')
    discount = models.DecimalField(max_digits=5, decimal_places=2,
                                   validators=[MinValueValidator(0), MaxValueValidator(100)])
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'todays_deals'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'start_time', 'end_time']),
        ]

    def __str__(self):
        return f"{self.product} -{self.discount}%"
