"""
Chit scheme models
"""
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.utils import end_date_for


class ChitScheme(models.Model):
    """
    A fixed-membership rotating savings fund.
    members_enrolled mirrors the number of CustomerScheme rows and is only changed
    by customers.services inside a transaction.
    """
    DURATION_DAYS = 'DAYS'
    DURATION_MONTHS = 'MONTHS'
    DURATION_TYPE_CHOICES = [
        (DURATION_DAYS, 'Days'),
        (DURATION_MONTHS, 'Months'),
    ]

    PAYMENT_DAILY = 'DAILY'
    PAYMENT_MONTHLY = 'MONTHLY'
    PAYMENT_TYPE_CHOICES = [
        (PAYMENT_DAILY, 'Daily'),
        (PAYMENT_MONTHLY, 'Monthly'),
    ]

    STATUS_ACTIVE = 'ACTIVE'
    STATUS_PAUSED = 'PAUSED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_PAUSED, 'Paused'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    name = models.CharField(max_length=255)
    chit_value = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(1000)])
    duration = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    duration_type = models.CharField(max_length=10, choices=DURATION_TYPE_CHOICES, default=DURATION_MONTHS)
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPE_CHOICES, default=PAYMENT_DAILY)
    daily_payment = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    monthly_payment = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    number_of_members = models.PositiveIntegerField(validators=[MinValueValidator(2)])
    members_enrolled = models.PositiveIntegerField(default=0)
    auction_rules = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    start_date = models.DateField()
    end_date = models.DateField()
    last_date = models.DateField(null=True, blank=True)
    description = models.CharField(max_length=500, blank=True, default='')
    commission_rate = models.DecimalField(
        max_digits=5, decimal_places=4, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(1)],
    )
    penalty_rate = models.DecimalField(
        max_digits=5, decimal_places=4, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(1)],
    )
    min_bid_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_bid_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_schemes',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'chit_schemes'
        verbose_name = 'Chit Scheme'
        verbose_name_plural = 'Chit Schemes'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(members_enrolled__lte=models.F('number_of_members')),
                name='chit_scheme_members_within_capacity',
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def period_payment(self):
        """Configured per-period installment for the scheme's payment cadence."""
        if self.payment_type == self.PAYMENT_MONTHLY:
            return self.monthly_payment
        return self.daily_payment

    @property
    def has_capacity(self):
        return self.members_enrolled < self.number_of_members

    def compute_end_date(self):
        return end_date_for(self.start_date, self.duration, self.duration_type)

    def save(self, *args, **kwargs):
        # end_date is always derived from start_date, duration and duration_type
        if self.start_date and self.duration:
            self.end_date = self.compute_end_date()
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'end_date' not in update_fields:
                if {'start_date', 'duration', 'duration_type'} & set(update_fields):
                    kwargs['update_fields'] = list(update_fields) + ['end_date']
        super().save(*args, **kwargs)
