"""
Auction (chit lifting) models
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from customers.models import Customer
from schemes.models import ChitScheme


class Auction(models.Model):
    """
    One lifting event of a scheme. A COMPLETED auction cannot be deleted.
    new_daily_payment only reaches enrollments through auctions.services.propagate_daily_payment.
    """
    STATUS_SCHEDULED = 'SCHEDULED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    chit_scheme = models.ForeignKey(ChitScheme, on_delete=models.CASCADE, related_name='auctions')
    auction_date = models.DateField(db_index=True)
    winning_member = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='won_auctions',
    )
    amount_received = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    new_daily_payment = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(1)],
    )
    previous_daily_payment = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(1)],
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    remarks = models.TextField(blank=True, default='')
    propagated_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_auctions',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'auctions'
        verbose_name = 'Auction'
        verbose_name_plural = 'Auctions'
        ordering = ['-auction_date', '-created_at']

    def __str__(self):
        return f"{self.chit_scheme_id} auction on {self.auction_date}"
