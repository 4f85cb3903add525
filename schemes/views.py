"""
Chit scheme views
"""
import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAgentOrAdmin, ReadOnly
from core.exceptions import ResourceNotFound
from core.pagination import paginate
from core.responses import created, ok
from core.sorting import resolve_ordering
from core.utils import query_choice
from .models import ChitScheme
from .serializers import ChitSchemeListSerializer, ChitSchemeSerializer
from . import services

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'createdAt': 'created_at',
    'name': 'name',
    'chitValue': 'chit_value',
    'startDate': 'start_date',
    'endDate': 'end_date',
    'status': 'status',
    'numberOfMembers': 'number_of_members',
    'membersEnrolled': 'members_enrolled',
}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def schemes_list_or_create_view(request):
    """GET = list, POST = create"""
    if request.method == 'GET':
        return _list_schemes(request)

    serializer = ChitSchemeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    scheme = serializer.save(created_by=request.user)
    logger.info('[SCHEME] created scheme_id=%s by user_id=%s', scheme.id, request.user.id)
    return created(ChitSchemeSerializer(scheme).data, message='Chit scheme created successfully')


def _list_schemes(request):
    """
    GET /api/chit-schemes
    Query params: page, limit, sortBy, sortOrder, status, search (name / auction rules)
    """
    params = request.query_params
    qs = ChitScheme.objects.annotate(
        customer_count=Count('enrollments', distinct=True),
        auction_count=Count('auctions', distinct=True),
    )
    status_filter = query_choice(params, 'status', [c[0] for c in ChitScheme.STATUS_CHOICES])
    if status_filter:
        qs = qs.filter(status=status_filter)
    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(auction_rules__icontains=search))
    qs = qs.order_by(resolve_ordering(params, SORT_FIELDS), 'id')
    return paginate(qs, request, ChitSchemeListSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def scheme_detail_view(request, pk):
    """
    GET /api/chit-schemes/{id} - scheme with its enrollments and auctions
    PUT /api/chit-schemes/{id} - partial update; endDate follows startDate/duration/durationType
    DELETE /api/chit-schemes/{id} - only schemes without enrollments or auctions
    """
    if request.method == 'GET':
        scheme = services.get_scheme(pk)
        data = ChitSchemeSerializer(scheme).data
        data['customers'] = [
            {
                'customerSchemeId': e.id,
                'id': e.customer_id,
                'name': e.customer.name,
                'mobile': e.customer.mobile,
                'status': e.status,
                'amountPerDay': float(e.amount_per_day),
                'duration': e.duration,
                'balance': float(e.balance),
                'enrolledAt': e.enrolled_at.isoformat(),
            }
            for e in scheme.enrollments.select_related('customer').order_by('enrolled_at')
        ]
        data['auctions'] = [
            {
                'id': a.id,
                'auctionDate': a.auction_date.isoformat(),
                'status': a.status,
                'winningMemberId': a.winning_member_id,
                'amountReceived': float(a.amount_received),
                'discountAmount': float(a.discount_amount),
            }
            for a in scheme.auctions.order_by('-auction_date')
        ]
        return ok(data)

    if request.method == 'DELETE':
        services.delete_scheme(pk)
        return ok(message='Chit scheme deleted successfully')

    with transaction.atomic():
        try:
            scheme = ChitScheme.objects.select_for_update().get(pk=pk)
        except ChitScheme.DoesNotExist:
            raise ResourceNotFound('Chit scheme')
        serializer = ChitSchemeSerializer(scheme, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        scheme = serializer.save()
    logger.info('[SCHEME] updated scheme_id=%s', scheme.id)
    return ok(ChitSchemeSerializer(scheme).data, message='Chit scheme updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scheme_stats_view(request, pk):
    """GET /api/chit-schemes/{id}/stats"""
    scheme = services.get_scheme(pk)
    return ok(services.scheme_stats(scheme))
