"""
Customer and enrollment (CustomerScheme) models
"""
from django.db import models
from django.core.validators import MinValueValidator

from schemes.models import ChitScheme


class Customer(models.Model):
    """
    A fund member. Scheme membership lives on CustomerScheme only.
    """
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_DEFAULTED = 'DEFAULTED'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_DEFAULTED, 'Defaulted'),
    ]

    name = models.CharField(max_length=255)
    mobile = models.CharField(max_length=20, db_index=True)
    address = models.TextField()
    photo = models.CharField(max_length=500, blank=True, null=True)
    documents = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    last_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    schemes = models.ManyToManyField(ChitScheme, through='CustomerScheme', related_name='customers')

    class Meta:
        db_table = 'customers'
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.mobile})"


class CustomerScheme(models.Model):
    """
    Enrollment of a customer in a chit scheme.
    balance = amount_per_day * duration - payments recognized so far.
    """
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_DEFAULTED = 'DEFAULTED'
    STATUS_CHOICES = Customer.STATUS_CHOICES

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='enrollments')
    scheme = models.ForeignKey(ChitScheme, on_delete=models.CASCADE, related_name='enrollments')
    enrolled_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    amount_per_day = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(1)])
    duration = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    duration_type = models.CharField(
        max_length=10, choices=ChitScheme.DURATION_TYPE_CHOICES, default=ChitScheme.DURATION_MONTHS,
    )
    start_date = models.DateField()
    last_date = models.DateField(null=True, blank=True)
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customer_schemes'
        verbose_name = 'Customer Scheme'
        verbose_name_plural = 'Customer Schemes'
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(fields=['customer', 'scheme'], name='unique_customer_scheme'),
        ]

    def __str__(self):
        return f"{self.customer_id} in {self.scheme_id}"

    @property
    def contracted_amount(self):
        return self.amount_per_day * self.duration
