"""
Collection services - balance side effects of recording, editing and deleting collections.

Balance policy (kept from the existing API contract):
- record / update: the enrollment balance is overwritten with the collector-supplied balance_remaining
- delete: the deleted amount_paid is added back to the current balance
Each operation runs in one transaction holding a row lock on the enrollment.
"""
import logging

from django.db import transaction
from django.db.models import Sum
from rest_framework.exceptions import ValidationError

from core.exceptions import BusinessRuleViolation, InvalidMember, ResourceNotFound
from core.utils import money
from customers.models import Customer, CustomerScheme
from .models import Collection

logger = logging.getLogger(__name__)


def resolve_enrollment(customer, customer_scheme_id=None):
    """
    Pick the enrollment a collection applies to.
    Explicit id must belong to the customer; without one the customer must have exactly one enrollment.
    """
    if customer_scheme_id is not None:
        try:
            return CustomerScheme.objects.select_for_update().get(pk=customer_scheme_id)
        except CustomerScheme.DoesNotExist:
            raise ResourceNotFound('Customer scheme')

    enrollments = list(CustomerScheme.objects.select_for_update().filter(customer=customer)[:2])
    if not enrollments:
        raise BusinessRuleViolation('Customer is not enrolled in any chit scheme')
    if len(enrollments) > 1:
        raise ValidationError({
            'customerSchemeId': ['Customer has several enrollments; customerSchemeId is required'],
        })
    return enrollments[0]


@transaction.atomic
def record_collection(customer_id, collector, amount_paid, date, balance_remaining,
                      payment_method=Collection.METHOD_CASH, remarks='', customer_scheme_id=None):
    try:
        customer = Customer.objects.get(pk=customer_id)
    except Customer.DoesNotExist:
        raise ResourceNotFound('Customer')

    enrollment = resolve_enrollment(customer, customer_scheme_id)
    if enrollment.customer_id != customer.pk:
        raise InvalidMember('Customer scheme does not belong to this customer')

    collection = Collection.objects.create(
        customer=customer,
        customer_scheme=enrollment,
        collector=collector,
        amount_paid=amount_paid,
        date=date,
        balance_remaining=balance_remaining,
        payment_method=payment_method,
        remarks=remarks or '',
    )
    old_balance = enrollment.balance
    enrollment.balance = money(balance_remaining)
    enrollment.save(update_fields=['balance', 'updated_at'])
    logger.info(
        '[COLLECTION] recorded collection_id=%s customer_id=%s enrollment_id=%s amount=%s balance %s -> %s',
        collection.pk, customer.pk, enrollment.pk, amount_paid, old_balance, enrollment.balance,
    )
    return collection


def _lock_collection(collection_id):
    try:
        return Collection.objects.select_for_update().get(pk=collection_id)
    except Collection.DoesNotExist:
        raise ResourceNotFound('Collection')


@transaction.atomic
def update_collection(collection_id, **changes):
    """
    Patch a collection. Customer and enrollment are fixed once recorded.
    A new balance_remaining overwrites the enrollment balance again.
    """
    collection = _lock_collection(collection_id)
    for field, value in changes.items():
        setattr(collection, field, value)
    collection.save()

    if 'balance_remaining' in changes:
        enrollment = CustomerScheme.objects.select_for_update().get(pk=collection.customer_scheme_id)
        old_balance = enrollment.balance
        enrollment.balance = money(changes['balance_remaining'])
        enrollment.save(update_fields=['balance', 'updated_at'])
        logger.info(
            '[COLLECTION] updated collection_id=%s enrollment_id=%s balance %s -> %s',
            collection.pk, enrollment.pk, old_balance, enrollment.balance,
        )
    return collection


@transaction.atomic
def delete_collection(collection_id):
    """Delete a collection and add its amount back to the enrollment balance."""
    collection = _lock_collection(collection_id)
    enrollment = CustomerScheme.objects.select_for_update().get(pk=collection.customer_scheme_id)
    old_balance = enrollment.balance
    enrollment.balance = money(enrollment.balance + collection.amount_paid)
    enrollment.save(update_fields=['balance', 'updated_at'])
    collection.delete()
    logger.info(
        '[COLLECTION] deleted collection_id=%s enrollment_id=%s balance %s -> %s',
        collection_id, enrollment.pk, old_balance, enrollment.balance,
    )
    return enrollment


def derived_balance(enrollment):
    """contracted amount minus everything collected against the enrollment."""
    paid = enrollment.collections.aggregate(total=Sum('amount_paid'))['total'] or 0
    return max(money(enrollment.contracted_amount - paid), money(0))


def find_balance_drift(queryset=None):
    """
    Yield (enrollment, stored, derived) for every enrollment whose stored balance
    differs from contracted - sum(amount_paid).
    """
    qs = queryset if queryset is not None else CustomerScheme.objects.all()
    for enrollment in qs.select_related('customer', 'scheme').order_by('pk'):
        derived = derived_balance(enrollment)
        if enrollment.balance != derived:
            yield enrollment, enrollment.balance, derived


@transaction.atomic
def reconcile_balance(customer_scheme_id):
    """Reset a stored balance to its derived value."""
    enrollment = CustomerScheme.objects.select_for_update().get(pk=customer_scheme_id)
    old_balance = enrollment.balance
    enrollment.balance = derived_balance(enrollment)
    enrollment.save(update_fields=['balance', 'updated_at'])
    logger.info(
        '[RECONCILE] enrollment_id=%s balance %s -> %s', enrollment.pk, old_balance, enrollment.balance,
    )
    return enrollment
