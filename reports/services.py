"""
Report aggregation.
Reducers take plain rows (dicts from QuerySet.values()) and return JSON-ready dicts,
so every figure can be checked without a database. Views only fetch rows.
"""
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from rest_framework.exceptions import ValidationError

from core.utils import percent

GROUP_BY_CHOICES = ('day', 'week', 'month')

# Collection.objects.values(*COLLECTION_ROW_FIELDS) feeds the collection reducers
COLLECTION_ROW_FIELDS = (
    'id',
    'date',
    'amount_paid',
    'payment_method',
    'customer_id',
    'collector_id',
    'collector__name',
    'customer_scheme__scheme_id',
    'customer_scheme__scheme__name',
)

ZERO = Decimal('0')


def bucket_key(day, group_by):
    """day -> YYYY-MM-DD; week -> Sunday starting the week, YYYY-MM-DD; month -> YYYY-MM."""
    if group_by == 'day':
        return day.isoformat()
    if group_by == 'week':
        # isoweekday: Monday=1 .. Sunday=7
        start = day - timedelta(days=day.isoweekday() % 7)
        return start.isoformat()
    if group_by == 'month':
        return f'{day.year:04d}-{day.month:02d}'
    raise ValidationError({'groupBy': [f'Must be one of: {", ".join(GROUP_BY_CHOICES)}']})


def _add_breakdown(breakdown, key, amount):
    slot = breakdown.setdefault(key, {'amount': 0.0, 'count': 0})
    slot['amount'] += float(amount)
    slot['count'] += 1


def revenue_buckets(rows, group_by):
    """Revenue per time bucket with per-scheme and per-method breakdowns, sorted by key."""
    buckets = {}
    for row in rows:
        key = bucket_key(row['date'], group_by)
        bucket = buckets.setdefault(key, {
            'date': key,
            'totalRevenue': 0.0,
            'totalCollections': 0,
            'byScheme': {},
            'byPaymentMethod': {},
        })
        amount = row['amount_paid'] or ZERO
        bucket['totalRevenue'] += float(amount)
        bucket['totalCollections'] += 1
        _add_breakdown(bucket['byScheme'], row.get('customer_scheme__scheme__name') or 'Unassigned', amount)
        _add_breakdown(bucket['byPaymentMethod'], row['payment_method'], amount)
    return [buckets[key] for key in sorted(buckets)]


def collection_range_buckets(rows, group_by):
    """Collection totals per time bucket; byGroup splits by scheme, sorted by key."""
    buckets = {}
    for row in rows:
        key = bucket_key(row['date'], group_by)
        bucket = buckets.setdefault(key, {
            'date': key,
            'totalCollected': 0.0,
            'totalCollections': 0,
            'byMethod': {},
            'byGroup': {},
        })
        amount = row['amount_paid'] or ZERO
        bucket['totalCollected'] += float(amount)
        bucket['totalCollections'] += 1
        _add_breakdown(bucket['byMethod'], row['payment_method'], amount)
        _add_breakdown(bucket['byGroup'], row.get('customer_scheme__scheme__name') or 'Unassigned', amount)
    return [buckets[key] for key in sorted(buckets)]


def daily_collection_stats(rows):
    """Totals of one day's collections; a zero amount counts as pending."""
    total = ZERO
    paid = pending = 0
    by_method = OrderedDict()
    for row in rows:
        amount = row['amount_paid'] or ZERO
        total += amount
        if amount > 0:
            paid += 1
        else:
            pending += 1
        slot = by_method.setdefault(row['payment_method'], {'method': row['payment_method'], 'amount': 0.0, 'count': 0})
        slot['amount'] += float(amount)
        slot['count'] += 1
    return {
        'totalCollected': float(total),
        'paidMembers': paid,
        'pendingMembers': pending,
        'totalMembers': paid + pending,
        'collectionsByMethod': list(by_method.values()),
    }


def collector_efficiency(rows):
    """Per collector: paid / total collections as a rounded percentage."""
    collectors = OrderedDict()
    for row in rows:
        collector_id = row['collector_id']
        stats = collectors.setdefault(collector_id, {
            'collector': {'id': collector_id, 'name': row.get('collector__name')},
            'totalCollections': 0,
            'totalAmount': 0.0,
            'paidCollections': 0,
            'pendingCollections': 0,
        })
        amount = row['amount_paid'] or ZERO
        stats['totalCollections'] += 1
        stats['totalAmount'] += float(amount)
        if amount > 0:
            stats['paidCollections'] += 1
        else:
            stats['pendingCollections'] += 1
    result = []
    for stats in collectors.values():
        stats['efficiency'] = percent(stats['paidCollections'], stats['totalCollections'])
        result.append(stats)
    return result


def scheme_performance(scheme, enrollments, auctions):
    """
    scheme: dict with id, name, chit_value, number_of_members, members_enrolled, status
    enrollments: dicts with status, amount_per_day, duration, balance
    auctions: dicts with status, amount_received, discount_amount
    """
    members = {'total': len(enrollments), 'active': 0, 'completed': 0, 'defaulted': 0}
    total_expected = total_balance = ZERO
    for enrollment in enrollments:
        members[enrollment['status'].lower()] += 1
        total_expected += enrollment['amount_per_day'] * enrollment['duration']
        total_balance += enrollment['balance']
    total_collected = total_expected - total_balance

    completed = [a for a in auctions if a['status'] == 'COMPLETED']
    total_received = sum((a['amount_received'] or ZERO for a in completed), ZERO)
    total_discount = sum((a['discount_amount'] or ZERO for a in completed), ZERO)

    return {
        'id': scheme['id'],
        'name': scheme['name'],
        'status': scheme['status'],
        'chitValue': float(scheme['chit_value']),
        'numberOfMembers': scheme['number_of_members'],
        'membersEnrolled': scheme['members_enrolled'],
        'members': members,
        'enrollmentRate': percent(len(enrollments), scheme['number_of_members']),
        'totalExpected': float(total_expected),
        'totalBalance': float(total_balance),
        'totalCollected': float(total_collected),
        'collectionRate': percent(total_collected, total_expected),
        'auctions': {
            'total': len(auctions),
            'completed': len(completed),
            'scheduled': sum(1 for a in auctions if a['status'] == 'SCHEDULED'),
            'cancelled': sum(1 for a in auctions if a['status'] == 'CANCELLED'),
        },
        'totalAmountReceived': float(total_received),
        'totalDiscount': float(total_discount),
        'averageDiscount': float(total_discount / len(completed)) if completed else 0,
    }


def customer_performance(customer, enrollments, collections, today):
    """
    customer: dict with id, name, mobile, status
    enrollments: dicts with amount_per_day, duration, balance, start_date
    collections: dicts with date, amount_paid
    """
    total_amount = sum((e['amount_per_day'] * e['duration'] for e in enrollments), ZERO)
    remaining = sum((e['balance'] for e in enrollments), ZERO)
    total_paid = sum((c['amount_paid'] or ZERO for c in collections), ZERO)
    payment_days = len({c['date'] for c in collections if (c['amount_paid'] or ZERO) > 0})

    starts = [e['start_date'] for e in enrollments if e.get('start_date')]
    expected_days = 0
    if starts:
        expected_days = max((today - min(starts)).days, 0)

    dates = [c['date'] for c in collections]
    return {
        'id': customer['id'],
        'name': customer['name'],
        'mobile': customer['mobile'],
        'status': customer['status'],
        'totalAmount': float(total_amount),
        'totalPaid': float(total_paid),
        'remainingBalance': float(remaining),
        'progressPercentage': percent(total_amount - remaining, total_amount),
        'averagePayment': float(total_paid / len(collections)) if collections else 0,
        'consistencyPercentage': percent(payment_days, expected_days),
        'totalCollections': len(collections),
        'lastPaymentDate': max(dates).isoformat() if dates else None,
    }


def period_collection_report(rows, defaulters, **period):
    """
    Daily/monthly/yearly summary over the period's collections.
    Each collection counts once: paid when amount > 0, pending otherwise.
    collectionRate = paid / (paid + pending), one decimal.
    """
    total = ZERO
    paid = pending = 0
    for row in rows:
        amount = row['amount_paid'] or ZERO
        total += amount
        if amount > 0:
            paid += 1
        else:
            pending += 1
    report = dict(period)
    report.update({
        'totalCollection': float(total),
        'paidMembers': paid,
        'pendingMembers': pending,
        'defaulters': defaulters,
        'collectionRate': percent(paid, paid + pending, digits=1),
    })
    return report


def scheme_collection_summary(scheme, collected):
    """Collected amount as a share of chit value x members, one decimal."""
    pool = scheme['chit_value'] * scheme['number_of_members']
    return {
        'id': scheme['id'],
        'scheme': scheme['name'],
        'members': scheme['number_of_members'],
        'enrolled': scheme['members_enrolled'],
        'collection': percent(collected or ZERO, pool, digits=1),
        'status': scheme['status'],
    }
