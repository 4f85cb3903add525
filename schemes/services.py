"""
Scheme services - deletion guard and scheme statistics.
"""
import logging

from django.db import transaction
from django.db.models import Count, Q, Sum

from core.exceptions import HasDependents, ResourceNotFound
from .models import ChitScheme

logger = logging.getLogger(__name__)


def get_scheme(scheme_id):
    try:
        return ChitScheme.objects.get(pk=scheme_id)
    except ChitScheme.DoesNotExist:
        raise ResourceNotFound('Chit scheme')


@transaction.atomic
def delete_scheme(scheme_id):
    """Schemes with enrollments or auctions are never deleted."""
    try:
        scheme = ChitScheme.objects.select_for_update().get(pk=scheme_id)
    except ChitScheme.DoesNotExist:
        raise ResourceNotFound('Chit scheme')
    if scheme.enrollments.exists() or scheme.auctions.exists():
        raise HasDependents('Cannot delete chit scheme with existing customers or auctions')
    scheme.delete()
    logger.info('[SCHEME] deleted scheme_id=%s', scheme_id)


def scheme_stats(scheme):
    """Member, balance and auction figures of one scheme."""
    members = scheme.enrollments.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status='ACTIVE')),
        completed=Count('id', filter=Q(status='COMPLETED')),
        defaulted=Count('id', filter=Q(status='DEFAULTED')),
        total_balance=Sum('balance'),
    )
    total_collected = sum(
        (e.contracted_amount - e.balance for e in scheme.enrollments.all()),
        0,
    )
    auctions = scheme.auctions.aggregate(
        total=Count('id'),
        completed=Count('id', filter=Q(status='COMPLETED')),
        received=Sum('amount_received', filter=Q(status='COMPLETED')),
        discount=Sum('discount_amount', filter=Q(status='COMPLETED')),
    )
    return {
        'totalMembers': members['total'],
        'activeMembers': members['active'],
        'completedMembers': members['completed'],
        'defaultedMembers': members['defaulted'],
        'totalBalance': float(members['total_balance'] or 0),
        'totalCollected': float(total_collected),
        'totalAuctions': auctions['total'],
        'completedAuctions': auctions['completed'],
        'totalAmountReceived': float(auctions['received'] or 0),
        'totalDiscount': float(auctions['discount'] or 0),
    }
