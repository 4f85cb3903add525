"""
Auction views
"""
import logging

from django.db.models import Count, Q, Sum
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAgentOrAdmin, ReadOnly
from core.exceptions import ResourceNotFound
from core.pagination import paginate
from core.responses import created, ok
from core.sorting import resolve_ordering
from core.utils import query_choice, query_int, today
from .models import Auction
from .serializers import STATUS_CHOICES, AuctionCreateSerializer, AuctionSerializer, AuctionUpdateSerializer
from . import services

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'auctionDate': 'auction_date',
    'createdAt': 'created_at',
    'amountReceived': 'amount_received',
    'discountAmount': 'discount_amount',
    'status': 'status',
}


def _auctions_queryset():
    return Auction.objects.select_related('chit_scheme', 'winning_member')


def _get_auction(pk):
    try:
        return _auctions_queryset().get(pk=pk)
    except Auction.DoesNotExist:
        raise ResourceNotFound('Auction')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def auctions_list_or_create_view(request):
    """
    GET /api/auctions
    Query params: page, limit, sortBy (default auctionDate), sortOrder, status, chitSchemeId,
    search (scheme name / winner name / remarks)
    POST /api/auctions
    """
    if request.method == 'POST':
        serializer = AuctionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        auction = services.record_auction(created_by=request.user, **serializer.validated_data)
        return created(AuctionSerializer(_get_auction(auction.pk)).data, message='Auction created successfully')

    params = request.query_params
    qs = _auctions_queryset()
    status_filter = query_choice(params, 'status', STATUS_CHOICES)
    if status_filter:
        qs = qs.filter(status=status_filter)
    scheme_id = query_int(params, 'chitSchemeId', min_value=1)
    if scheme_id:
        qs = qs.filter(chit_scheme_id=scheme_id)
    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(
            Q(chit_scheme__name__icontains=search)
            | Q(winning_member__name__icontains=search)
            | Q(remarks__icontains=search)
        )
    qs = qs.order_by(resolve_ordering(params, SORT_FIELDS, default='auctionDate'), '-id')
    return paginate(qs, request, AuctionSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def auction_detail_view(request, pk):
    """
    GET /api/auctions/{id}
    PUT /api/auctions/{id} - winner re-validated against the auction's scheme
    DELETE /api/auctions/{id} - completed auctions cannot be deleted
    """
    if request.method == 'GET':
        return ok(AuctionSerializer(_get_auction(pk)).data)

    if request.method == 'DELETE':
        services.delete_auction(pk)
        return ok(message='Auction deleted successfully')

    serializer = AuctionUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.update_auction(pk, **serializer.validated_data)
    return ok(AuctionSerializer(_get_auction(pk)).data, message='Auction updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAgentOrAdmin])
def auction_propagate_view(request, pk):
    """
    POST /api/auctions/{id}/propagate
    Apply the completed auction's newDailyPayment to the scheme and its active enrollments.
    """
    updated = services.propagate_daily_payment(pk)
    return ok(
        {'auction': AuctionSerializer(_get_auction(pk)).data, 'updatedEnrollments': updated},
        message='Daily payment propagated to enrollments',
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def auction_stats_view(request):
    """GET /api/auctions/stats/overview?chitSchemeId="""
    qs = Auction.objects.all()
    scheme_id = query_int(request.query_params, 'chitSchemeId', min_value=1)
    if scheme_id:
        qs = qs.filter(chit_scheme_id=scheme_id)
    completed = Q(status=Auction.STATUS_COMPLETED)
    stats = qs.aggregate(
        total=Count('id'),
        scheduled=Count('id', filter=Q(status=Auction.STATUS_SCHEDULED)),
        completed=Count('id', filter=completed),
        cancelled=Count('id', filter=Q(status=Auction.STATUS_CANCELLED)),
        received=Sum('amount_received', filter=completed),
        discount=Sum('discount_amount', filter=completed),
    )
    return ok({
        'totalAuctions': stats['total'],
        'scheduledAuctions': stats['scheduled'],
        'completedAuctions': stats['completed'],
        'cancelledAuctions': stats['cancelled'],
        'totalAmountReceived': float(stats['received'] or 0),
        'totalDiscount': float(stats['discount'] or 0),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def upcoming_auctions_view(request):
    """GET /api/auctions/upcoming/list?limit=5 - scheduled auctions from today on, soonest first"""
    limit = query_int(request.query_params, 'limit', default=5, min_value=1, max_value=100)
    qs = (
        _auctions_queryset()
        .filter(status=Auction.STATUS_SCHEDULED, auction_date__gte=today())
        .order_by('auction_date', 'id')[:limit]
    )
    return ok(AuctionSerializer(qs, many=True).data)
