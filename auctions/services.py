"""
Auction services - winner validation, deletion guard and the explicit
daily-payment propagation step.
"""
import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import BusinessRuleViolation, ImmutableRecord, InvalidMember, ResourceNotFound
from core.utils import money
from customers.models import Customer, CustomerScheme
from schemes.models import ChitScheme
from .models import Auction

logger = logging.getLogger(__name__)


def validate_winning_member(scheme_id, winning_member_id):
    """The winner must exist and hold an enrollment in the auctioned scheme."""
    if winning_member_id is None:
        return None
    try:
        member = Customer.objects.get(pk=winning_member_id)
    except Customer.DoesNotExist:
        raise InvalidMember('Winning member not found')
    if not CustomerScheme.objects.filter(customer=member, scheme_id=scheme_id).exists():
        raise InvalidMember()
    return member


@transaction.atomic
def record_auction(scheme_id, created_by, auction_date, winning_member_id=None, **fields):
    """Create an auction. Enrollment balances are not touched."""
    if not ChitScheme.objects.filter(pk=scheme_id).exists():
        raise ResourceNotFound('Chit scheme')
    member = validate_winning_member(scheme_id, winning_member_id)
    auction = Auction.objects.create(
        chit_scheme_id=scheme_id,
        auction_date=auction_date,
        winning_member=member,
        created_by=created_by,
        **fields,
    )
    logger.info(
        '[AUCTION] recorded auction_id=%s scheme_id=%s winner_id=%s status=%s',
        auction.pk, scheme_id, winning_member_id, auction.status,
    )
    return auction


def _get_auction(auction_id, lock=False):
    qs = Auction.objects.select_for_update() if lock else Auction.objects
    try:
        return qs.get(pk=auction_id)
    except Auction.DoesNotExist:
        raise ResourceNotFound('Auction')


@transaction.atomic
def update_auction(auction_id, **changes):
    """
    Patch an auction. The scheme is fixed; a new winner is validated against it.
    A COMPLETED auction stays COMPLETED, so it can never be brought back into a deletable state.
    """
    auction = _get_auction(auction_id, lock=True)
    new_status = changes.get('status', auction.status)
    if auction.status == Auction.STATUS_COMPLETED and new_status != Auction.STATUS_COMPLETED:
        raise ImmutableRecord('Cannot change status of completed auction')
    if 'winning_member_id' in changes:
        member = validate_winning_member(auction.chit_scheme_id, changes.pop('winning_member_id'))
        auction.winning_member = member
    for field, value in changes.items():
        setattr(auction, field, value)
    auction.save()
    return auction


@transaction.atomic
def delete_auction(auction_id):
    auction = _get_auction(auction_id, lock=True)
    if auction.status == Auction.STATUS_COMPLETED:
        raise ImmutableRecord('Cannot delete completed auction')
    auction.delete()
    logger.info('[AUCTION] deleted auction_id=%s', auction_id)


@transaction.atomic
def propagate_daily_payment(auction_id):
    """
    Apply a completed auction's new_daily_payment to the scheme and its ACTIVE enrollments.
    Each enrollment balance moves by (new - old) * duration, floored at zero.
    Runs once per auction.
    """
    auction = _get_auction(auction_id, lock=True)
    if auction.status != Auction.STATUS_COMPLETED:
        raise BusinessRuleViolation('Only completed auctions can be propagated')
    if auction.new_daily_payment is None:
        raise BusinessRuleViolation('Auction has no new daily payment')
    if auction.propagated_at is not None:
        raise BusinessRuleViolation('Auction has already been propagated')

    scheme = ChitScheme.objects.select_for_update().get(pk=auction.chit_scheme_id)
    new_payment = auction.new_daily_payment
    enrollments = CustomerScheme.objects.select_for_update().filter(
        scheme=scheme, status=CustomerScheme.STATUS_ACTIVE,
    ).order_by('pk')

    updated = 0
    for enrollment in enrollments:
        delta = (new_payment - enrollment.amount_per_day) * enrollment.duration
        enrollment.amount_per_day = new_payment
        enrollment.balance = max(money(enrollment.balance + delta), money(0))
        enrollment.save(update_fields=['amount_per_day', 'balance', 'updated_at'])
        updated += 1

    if scheme.payment_type == ChitScheme.PAYMENT_MONTHLY:
        scheme.monthly_payment = new_payment
        scheme.save(update_fields=['monthly_payment', 'updated_at'])
    else:
        scheme.daily_payment = new_payment
        scheme.save(update_fields=['daily_payment', 'updated_at'])

    auction.propagated_at = timezone.now()
    auction.save(update_fields=['propagated_at', 'updated_at'])
    logger.info(
        '[AUCTION] propagated auction_id=%s scheme_id=%s new_payment=%s enrollments=%s',
        auction.pk, scheme.pk, new_payment, updated,
    )
    return updated
