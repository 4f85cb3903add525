"""
Passbook ledger models
"""
from django.core.validators import MinValueValidator
from django.db import models

from customers.models import CustomerScheme


class PassbookEntry(models.Model):
    """
    Per-period ledger line of an enrollment.
    GENERATED entries are derived from collections and read-only; at most one MANUAL
    entry exists per enrollment and month.
    """
    TYPE_GENERATED = 'GENERATED'
    TYPE_MANUAL = 'MANUAL'
    TYPE_CHOICES = [
        (TYPE_GENERATED, 'Generated'),
        (TYPE_MANUAL, 'Manual'),
    ]

    LIFTING_YES = 'YES'
    LIFTING_NO = 'NO'
    LIFTING_CHOICES = [
        (LIFTING_YES, 'Yes'),
        (LIFTING_NO, 'No'),
    ]

    FREQUENCY_DAILY = 'DAILY'
    FREQUENCY_MONTHLY = 'MONTHLY'
    FREQUENCY_CHOICES = [
        (FREQUENCY_DAILY, 'Daily'),
        (FREQUENCY_MONTHLY, 'Monthly'),
    ]

    customer_scheme = models.ForeignKey(CustomerScheme, on_delete=models.CASCADE, related_name='passbook_entries')
    month = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    date = models.DateField(db_index=True)
    daily_payment = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    chitti_amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    chit_lifting_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)],
    )
    chit_lifting = models.CharField(max_length=3, choices=LIFTING_CHOICES, default=LIFTING_NO)
    payment_method = models.CharField(max_length=20)
    payment_frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES, default=FREQUENCY_DAILY)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_MANUAL, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'passbook_entries'
        verbose_name = 'Passbook Entry'
        verbose_name_plural = 'Passbook Entries'
        ordering = ['-date', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['customer_scheme', 'month'],
                condition=models.Q(type='MANUAL'),
                name='unique_manual_entry_per_month',
            ),
        ]

    def __str__(self):
        return f"{self.customer_scheme_id} month {self.month} ({self.type})"

    @property
    def is_generated(self):
        return self.type == self.TYPE_GENERATED
