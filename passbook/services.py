"""
Passbook services - manual entry rules, generation from collections, summaries and
profit statistics.
"""
import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from rest_framework.exceptions import ValidationError

from core.exceptions import BusinessRuleViolation, ImmutableRecord, InvalidMember, ResourceNotFound
from core.utils import days_in_month, money, percent
from customers.models import Customer, CustomerScheme
from ledger.services import resolve_enrollment
from schemes.models import ChitScheme
from .models import PassbookEntry

logger = logging.getLogger(__name__)

DUPLICATE_MANUAL_MESSAGE = 'Manual entry already exists for this month'


def _get_enrollment(customer_scheme_id):
    try:
        return CustomerScheme.objects.select_related('scheme', 'customer').get(pk=customer_scheme_id)
    except CustomerScheme.DoesNotExist:
        raise ResourceNotFound('Customer scheme')


def _get_entry(entry_id):
    try:
        return PassbookEntry.objects.select_for_update().get(pk=entry_id)
    except PassbookEntry.DoesNotExist:
        raise ResourceNotFound('Passbook entry')


@transaction.atomic
def create_manual_entry(customer_scheme_id=None, customer_id=None, **fields):
    """Either the enrollment id or a customer with a single enrollment identifies the passbook."""
    if customer_scheme_id is None:
        if customer_id is None:
            raise ValidationError({'customerSchemeId': ['customerSchemeId or customerId is required']})
        try:
            customer = Customer.objects.get(pk=customer_id)
        except Customer.DoesNotExist:
            raise ResourceNotFound('Customer')
        customer_scheme_id = resolve_enrollment(customer).pk
    enrollment = _get_enrollment(customer_scheme_id)
    if customer_id is not None and enrollment.customer_id != customer_id:
        raise InvalidMember('Customer scheme does not belong to this customer')
    month = fields['month']
    if PassbookEntry.objects.filter(
        customer_scheme=enrollment, month=month, type=PassbookEntry.TYPE_MANUAL,
    ).exists():
        raise BusinessRuleViolation(DUPLICATE_MANUAL_MESSAGE)
    fields['type'] = PassbookEntry.TYPE_MANUAL
    try:
        # Savepoint: a concurrent insert trips the unique constraint instead
        with transaction.atomic():
            entry = PassbookEntry.objects.create(customer_scheme=enrollment, **fields)
    except IntegrityError:
        raise BusinessRuleViolation(DUPLICATE_MANUAL_MESSAGE)
    logger.info('[PASSBOOK] manual entry_id=%s enrollment_id=%s month=%s', entry.pk, enrollment.pk, month)
    return entry


@transaction.atomic
def update_entry(entry_id, **changes):
    entry = _get_entry(entry_id)
    if entry.is_generated:
        raise ImmutableRecord('Cannot update generated entries')
    new_month = changes.get('month', entry.month)
    if new_month != entry.month and PassbookEntry.objects.filter(
        customer_scheme_id=entry.customer_scheme_id, month=new_month, type=PassbookEntry.TYPE_MANUAL,
    ).exclude(pk=entry.pk).exists():
        raise BusinessRuleViolation(DUPLICATE_MANUAL_MESSAGE)
    for field, value in changes.items():
        setattr(entry, field, value)
    entry.save()
    return entry


@transaction.atomic
def delete_entry(entry_id):
    entry = _get_entry(entry_id)
    if entry.is_generated:
        raise ImmutableRecord('Cannot delete generated entries')
    entry.delete()
    logger.info('[PASSBOOK] deleted entry_id=%s', entry_id)


def period_index(enrollment, day):
    """1-based period of `day` within the enrollment: calendar months, or 30-day blocks for DAYS."""
    start = enrollment.start_date
    if enrollment.duration_type == ChitScheme.DURATION_DAYS:
        return max((day - start).days // 30 + 1, 1)
    months = (day.year - start.year) * 12 + (day.month - start.month)
    if day.day < start.day:
        months -= 1
    return max(months + 1, 1)


@transaction.atomic
def generate_entries(customer_scheme_id):
    """
    Create one GENERATED entry per collection date of the enrollment that has none yet.
    Safe to run repeatedly.
    """
    enrollment = _get_enrollment(customer_scheme_id)
    existing_dates = set(
        PassbookEntry.objects.filter(
            customer_scheme=enrollment, type=PassbookEntry.TYPE_GENERATED,
        ).values_list('date', flat=True)
    )

    by_date = OrderedDict()
    for collection in enrollment.collections.order_by('date', 'created_at'):
        if collection.date in existing_dates:
            continue
        bucket = by_date.setdefault(collection.date, {'amount': Decimal('0'), 'method': None})
        bucket['amount'] += collection.amount_paid
        bucket['method'] = collection.payment_method

    frequency = (
        PassbookEntry.FREQUENCY_MONTHLY
        if enrollment.scheme.payment_type == ChitScheme.PAYMENT_MONTHLY
        else PassbookEntry.FREQUENCY_DAILY
    )
    entries = [
        PassbookEntry(
            customer_scheme=enrollment,
            month=period_index(enrollment, day),
            date=day,
            daily_payment=enrollment.amount_per_day,
            amount=money(bucket['amount']),
            chitti_amount=money(enrollment.contracted_amount),
            chit_lifting=PassbookEntry.LIFTING_NO,
            payment_method=bucket['method'],
            payment_frequency=frequency,
            type=PassbookEntry.TYPE_GENERATED,
        )
        for day, bucket in by_date.items()
    ]
    PassbookEntry.objects.bulk_create(entries)
    logger.info('[PASSBOOK] generated %s entries for enrollment_id=%s', len(entries), enrollment.pk)
    return len(entries)


def customer_summary(customer):
    """Totals over every passbook entry and enrollment of a customer."""
    entries = PassbookEntry.objects.filter(customer_scheme__customer=customer)
    totals = entries.aggregate(total_paid=Sum('amount'), total_chitti=Sum('chitti_amount'))
    enrollments = list(customer.enrollments.all())
    total_amount = sum((e.contracted_amount for e in enrollments), Decimal('0'))
    remaining = sum((e.balance for e in enrollments), Decimal('0'))
    return {
        'totalEntries': entries.count(),
        'manualEntries': entries.filter(type=PassbookEntry.TYPE_MANUAL).count(),
        'generatedEntries': entries.filter(type=PassbookEntry.TYPE_GENERATED).count(),
        'totalPaid': float(totals['total_paid'] or 0),
        'totalChittiAmount': float(totals['total_chitti'] or 0),
        'remainingBalance': float(remaining),
        'totalAmount': float(total_amount),
        'progressPercentage': percent(total_amount - remaining, total_amount),
    }


def _amounts_on(day, enrollment_ids):
    rows = (
        PassbookEntry.objects.filter(customer_scheme_id__in=enrollment_ids, date=day)
        .values('customer_scheme_id')
        .annotate(total=Sum('amount'))
    )
    return {row['customer_scheme_id']: row['total'] or Decimal('0') for row in rows}


def profit_statistics(day):
    """
    Expected vs actual installments of every ACTIVE enrollment in an ACTIVE scheme on `day`.
    Actual amounts fall back to the previous day's entries when `day` has none.
    """
    enrollments = list(
        CustomerScheme.objects.filter(
            status=CustomerScheme.STATUS_ACTIVE,
            scheme__status=ChitScheme.STATUS_ACTIVE,
        ).select_related('customer', 'scheme').order_by('pk')
    )
    ids = [e.pk for e in enrollments]
    today_amounts = _amounts_on(day, ids)
    yesterday_amounts = _amounts_on(day - timedelta(days=1), ids)
    default_rate = Decimal(str(settings.DEFAULT_COMMISSION_RATE))

    paid, pending, backlog = [], [], []
    total_expected = total_actual = total_backlog = daily_profit = Decimal('0')
    for enrollment in enrollments:
        scheme = enrollment.scheme
        expected = scheme.period_payment or Decimal('0')
        actual = today_amounts.get(enrollment.pk)
        if actual is None:
            actual = yesterday_amounts.get(enrollment.pk, Decimal('0'))
        shortfall = expected - actual if expected > actual else Decimal('0')
        rate = scheme.commission_rate if scheme.commission_rate is not None else default_rate

        total_expected += expected
        total_actual += actual
        total_backlog += shortfall
        daily_profit += actual * rate

        row = {
            'customerSchemeId': enrollment.pk,
            'customerId': enrollment.customer_id,
            'customerName': enrollment.customer.name,
            'mobile': enrollment.customer.mobile,
            'schemeId': scheme.pk,
            'schemeName': scheme.name,
            'expectedDaily': float(expected),
            'actualDaily': float(actual),
            'backlog': float(shortfall),
        }
        if actual >= expected:
            paid.append(row)
        elif actual == 0:
            pending.append(row)
        else:
            backlog.append(row)

    daily_profit = money(daily_profit)
    return {
        'date': day.isoformat(),
        'totalCustomers': len(enrollments),
        'paidCount': len(paid),
        'pendingCount': len(pending),
        'backlogCount': len(backlog),
        'totalExpected': float(total_expected),
        'totalActual': float(total_actual),
        'totalBacklog': float(total_backlog),
        'dailyProfit': float(daily_profit),
        'monthlyProfit': float(money(daily_profit * days_in_month(day))),
        'paid': paid,
        'pending': pending,
        'backlog': backlog,
    }
