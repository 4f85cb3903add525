"""
Customer services - enrollment ledger rules.
Single place where CustomerScheme rows are created or removed, so ChitScheme.members_enrolled
always equals the number of enrollment rows of the scheme.
"""
import logging

from django.db import transaction
from django.db.models import F

from core.exceptions import (
    AlreadyEnrolled,
    CapacityExceeded,
    HasDependents,
    ImmutableRecord,
    ResourceNotFound,
)
from core.utils import money
from schemes.models import ChitScheme
from .models import Customer, CustomerScheme

logger = logging.getLogger(__name__)


def _lock_scheme(scheme_id):
    try:
        return ChitScheme.objects.select_for_update().get(pk=scheme_id)
    except ChitScheme.DoesNotExist:
        raise ResourceNotFound('Chit scheme')


@transaction.atomic
def enroll(customer_id, scheme_id, amount_per_day, duration, start_date=None,
           duration_type=ChitScheme.DURATION_MONTHS, last_date=None):
    """
    Enroll a customer in a scheme. start_date defaults to the scheme start date.
    The scheme row is locked first, so concurrent enrollments are serialized on it and
    the capacity check cannot be overtaken.
    """
    scheme = _lock_scheme(scheme_id)
    if not Customer.objects.filter(pk=customer_id).exists():
        raise ResourceNotFound('Customer')
    if not scheme.has_capacity:
        raise CapacityExceeded()
    if CustomerScheme.objects.filter(customer_id=customer_id, scheme=scheme).exists():
        raise AlreadyEnrolled()

    enrollment = CustomerScheme.objects.create(
        customer_id=customer_id,
        scheme=scheme,
        amount_per_day=amount_per_day,
        duration=duration,
        duration_type=duration_type,
        start_date=start_date or scheme.start_date,
        last_date=last_date,
        balance=money(amount_per_day * duration),
    )
    ChitScheme.objects.filter(pk=scheme.pk).update(members_enrolled=F('members_enrolled') + 1)
    logger.info(
        '[ENROLL] customer_id=%s scheme_id=%s enrollment_id=%s balance=%s',
        customer_id, scheme.pk, enrollment.pk, enrollment.balance,
    )
    return enrollment


@transaction.atomic
def create_customer(enrollment_data=None, **customer_fields):
    """
    Create a customer and, when enrollment_data is given, enroll it in the same transaction.
    A rejected enrollment (missing scheme, full scheme) leaves no customer behind.
    """
    customer = Customer.objects.create(**customer_fields)
    if enrollment_data:
        enroll(customer_id=customer.pk, **enrollment_data)
    logger.info('[CUSTOMER] created customer_id=%s', customer.pk)
    return customer


def _has_dependents(enrollment):
    return enrollment.collections.exists() or enrollment.passbook_entries.exists()


@transaction.atomic
def unenroll(customer_scheme_id):
    """
    Remove an enrollment and decrement the scheme counter.
    COMPLETED enrollments and enrollments with collections or passbook entries are kept.
    """
    scheme_id = (
        CustomerScheme.objects.filter(pk=customer_scheme_id).values_list('scheme_id', flat=True).first()
    )
    if scheme_id is None:
        raise ResourceNotFound('Customer scheme')
    # Scheme before enrollment, same order as enroll and propagate_daily_payment
    _lock_scheme(scheme_id)
    try:
        enrollment = CustomerScheme.objects.select_for_update().get(pk=customer_scheme_id)
    except CustomerScheme.DoesNotExist:
        raise ResourceNotFound('Customer scheme')

    if enrollment.status == CustomerScheme.STATUS_COMPLETED:
        raise ImmutableRecord('Cannot remove a completed enrollment')
    if _has_dependents(enrollment):
        raise HasDependents('Cannot remove enrollment with existing collections or passbook entries')

    enrollment.delete()
    ChitScheme.objects.filter(pk=scheme_id, members_enrolled__gt=0).update(
        members_enrolled=F('members_enrolled') - 1
    )
    logger.info('[UNENROLL] enrollment_id=%s scheme_id=%s', customer_scheme_id, scheme_id)


@transaction.atomic
def update_enrollment(customer_scheme_id, **changes):
    """
    Update status or terms of an enrollment.
    Changing amount_per_day or duration shifts the balance by the change in contracted amount;
    payments already recognized stay recognized.
    """
    try:
        enrollment = CustomerScheme.objects.select_for_update().get(pk=customer_scheme_id)
    except CustomerScheme.DoesNotExist:
        raise ResourceNotFound('Customer scheme')

    old_contracted = enrollment.contracted_amount
    for field, value in changes.items():
        setattr(enrollment, field, value)

    if 'amount_per_day' in changes or 'duration' in changes:
        delta = enrollment.contracted_amount - old_contracted
        enrollment.balance = max(money(enrollment.balance + delta), money(0))
        logger.info(
            '[ENROLLMENT] terms changed enrollment_id=%s contracted %s -> %s balance=%s',
            enrollment.pk, old_contracted, enrollment.contracted_amount, enrollment.balance,
        )
    enrollment.save()
    return enrollment


@transaction.atomic
def delete_customer(customer_id):
    """
    Delete a customer with its enrollments and release every scheme slot it held.
    Customers with collections, passbook entries or a COMPLETED enrollment are kept.
    """
    try:
        customer = Customer.objects.select_for_update().get(pk=customer_id)
    except Customer.DoesNotExist:
        raise ResourceNotFound('Customer')

    if customer.collections.exists() or customer.enrollments.filter(passbook_entries__isnull=False).exists():
        raise HasDependents('Cannot delete customer with existing collections or passbook entries')
    if customer.enrollments.filter(status=CustomerScheme.STATUS_COMPLETED).exists():
        raise ImmutableRecord('Cannot delete customer with a completed enrollment')

    scheme_ids = list(customer.enrollments.values_list('scheme_id', flat=True))
    for scheme_id in sorted(scheme_ids):
        _lock_scheme(scheme_id)
    customer.delete()
    ChitScheme.objects.filter(pk__in=scheme_ids, members_enrolled__gt=0).update(
        members_enrolled=F('members_enrolled') - 1
    )
    logger.info('[CUSTOMER] deleted customer_id=%s released_schemes=%s', customer_id, scheme_ids)


def get_enrollments_for_customer(customer):
    """Canonical queryset: enrollments of a customer with their scheme."""
    return CustomerScheme.objects.filter(customer=customer).select_related('scheme')
