"""
Collection views
"""
import logging

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsCollectorOrAdmin, ReadOnly
from core.exceptions import ResourceNotFound
from core.pagination import paginate
from core.responses import created, ok
from core.sorting import resolve_ordering
from core.utils import query_choice, query_date, query_date_range, query_int, today
from reports.services import (
    COLLECTION_ROW_FIELDS,
    GROUP_BY_CHOICES,
    collection_range_buckets,
    daily_collection_stats,
)
from .models import Collection
from .serializers import (
    METHOD_CHOICES,
    CollectionCreateSerializer,
    CollectionSerializer,
    CollectionUpdateSerializer,
)
from . import services

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'date': 'date',
    'createdAt': 'created_at',
    'amountPaid': 'amount_paid',
    'balanceRemaining': 'balance_remaining',
    'paymentMethod': 'payment_method',
}


def _collections_queryset():
    return Collection.objects.select_related('customer', 'collector', 'customer_scheme__scheme')


def _get_collection(pk):
    try:
        return _collections_queryset().get(pk=pk)
    except Collection.DoesNotExist:
        raise ResourceNotFound('Collection')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsCollectorOrAdmin])
def collections_list_or_create_view(request):
    """
    GET /api/collections
    Query params: page, limit, sortBy (default date), sortOrder, date, customerId, collectorId,
    paymentMethod, search (customer name / mobile / remarks)
    POST /api/collections - record a payment; the enrollment balance becomes balanceRemaining
    """
    if request.method == 'POST':
        serializer = CollectionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        collection = services.record_collection(collector=request.user, **serializer.validated_data)
        return created(
            CollectionSerializer(_get_collection(collection.pk)).data,
            message='Collection recorded successfully',
        )

    params = request.query_params
    qs = _collections_queryset()
    day = query_date(params, 'date')
    if day:
        qs = qs.filter(date=day)
    customer_id = query_int(params, 'customerId', min_value=1)
    if customer_id:
        qs = qs.filter(customer_id=customer_id)
    collector_id = query_int(params, 'collectorId', min_value=1)
    if collector_id:
        qs = qs.filter(collector_id=collector_id)
    method = query_choice(params, 'paymentMethod', METHOD_CHOICES)
    if method:
        qs = qs.filter(payment_method=method)
    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(
            Q(customer__name__icontains=search)
            | Q(customer__mobile__icontains=search)
            | Q(remarks__icontains=search)
        )
    qs = qs.order_by(resolve_ordering(params, SORT_FIELDS, default='date'), '-id')
    return paginate(qs, request, CollectionSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsCollectorOrAdmin])
def collection_detail_view(request, pk):
    """
    GET /api/collections/{id}
    PUT /api/collections/{id} - a new balanceRemaining overwrites the enrollment balance
    DELETE /api/collections/{id} - amountPaid is added back to the enrollment balance
    """
    if request.method == 'GET':
        return ok(CollectionSerializer(_get_collection(pk)).data)

    if request.method == 'DELETE':
        enrollment = services.delete_collection(pk)
        return ok(
            {'customerSchemeId': enrollment.pk, 'balance': float(enrollment.balance)},
            message='Collection deleted successfully',
        )

    serializer = CollectionUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.update_collection(pk, **serializer.validated_data)
    return ok(CollectionSerializer(_get_collection(pk)).data, message='Collection updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_stats_view(request):
    """GET /api/collections/stats/daily?date=YYYY-MM-DD (default today)"""
    day = query_date(request.query_params, 'date', default=today())
    rows = list(Collection.objects.filter(date=day).values(*COLLECTION_ROW_FIELDS))
    stats = daily_collection_stats(rows)
    stats['date'] = day.isoformat()
    return ok(stats)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def range_stats_view(request):
    """GET /api/collections/stats/range?startDate&endDate&groupBy=day|week|month"""
    params = request.query_params
    start, end = query_date_range(params)
    group_by = query_choice(params, 'groupBy', GROUP_BY_CHOICES, default='day')
    rows = list(
        Collection.objects.filter(date__gte=start, date__lte=end)
        .order_by('date')
        .values(*COLLECTION_ROW_FIELDS)
    )
    return ok({
        'startDate': start.isoformat(),
        'endDate': end.isoformat(),
        'groupBy': group_by,
        'buckets': collection_range_buckets(rows, group_by),
    })
