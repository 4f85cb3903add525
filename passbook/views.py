"""
Passbook views
"""
import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAgentOrAdmin
from core.exceptions import ResourceNotFound
from core.pagination import paginate
from core.responses import created, ok
from core.utils import query_choice, query_date, query_int, today
from customers.models import Customer
from .models import PassbookEntry
from .serializers import (
    TYPE_CHOICES,
    PassbookEntryCreateSerializer,
    PassbookEntrySerializer,
    PassbookEntryUpdateSerializer,
)
from . import services

logger = logging.getLogger(__name__)

PASSBOOK_PAGE_SIZE = 20


def _entries_queryset():
    return PassbookEntry.objects.select_related('customer_scheme__scheme')


def _get_entry(pk):
    try:
        return _entries_queryset().get(pk=pk)
    except PassbookEntry.DoesNotExist:
        raise ResourceNotFound('Passbook entry')


def _get_customer(pk):
    try:
        return Customer.objects.get(pk=pk)
    except Customer.DoesNotExist:
        raise ResourceNotFound('Customer')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_passbook_view(request, customer_id):
    """
    GET /api/passbook/customer/{customerId}
    Query params: page, limit (default 20), type, month, year, customerSchemeId
    """
    customer = _get_customer(customer_id)
    params = request.query_params
    qs = _entries_queryset().filter(customer_scheme__customer=customer)
    entry_type = query_choice(params, 'type', TYPE_CHOICES)
    if entry_type:
        qs = qs.filter(type=entry_type)
    month = query_int(params, 'month', min_value=1)
    if month:
        qs = qs.filter(month=month)
    year = query_int(params, 'year', min_value=1900, max_value=9999)
    if year:
        qs = qs.filter(date__year=year)
    customer_scheme_id = query_int(params, 'customerSchemeId', min_value=1)
    if customer_scheme_id:
        qs = qs.filter(customer_scheme_id=customer_scheme_id)
    qs = qs.order_by('-date', '-created_at', '-id')
    return paginate(qs, request, PassbookEntrySerializer, page_size=PASSBOOK_PAGE_SIZE)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_passbook_summary_view(request, customer_id):
    """GET /api/passbook/customer/{customerId}/summary"""
    customer = _get_customer(customer_id)
    summary = services.customer_summary(customer)
    summary['customerId'] = customer.pk
    summary['customerName'] = customer.name
    return ok(summary)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAgentOrAdmin])
def passbook_create_view(request):
    """POST /api/passbook - manual entry, at most one per enrollment and month"""
    serializer = PassbookEntryCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    entry = services.create_manual_entry(**serializer.validated_data)
    return created(PassbookEntrySerializer(_get_entry(entry.pk)).data, message='Passbook entry created successfully')


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAgentOrAdmin])
def passbook_entry_view(request, pk):
    """
    PUT /api/passbook/{id}
    DELETE /api/passbook/{id}
    Generated entries are read-only.
    """
    if request.method == 'DELETE':
        services.delete_entry(pk)
        return ok(message='Passbook entry deleted successfully')

    serializer = PassbookEntryUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.update_entry(pk, **serializer.validated_data)
    return ok(PassbookEntrySerializer(_get_entry(pk)).data, message='Passbook entry updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAgentOrAdmin])
def passbook_generate_view(request, pk):
    """POST /api/passbook/customer-schemes/{customerSchemeId}/generate"""
    created_count = services.generate_entries(pk)
    total = PassbookEntry.objects.filter(customer_scheme_id=pk).count()
    return ok(
        {'customerSchemeId': pk, 'generated': created_count, 'totalEntries': total},
        message=f'{created_count} passbook entries generated',
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profit_stats_view(request):
    """GET /api/passbook/stats/profit?date=YYYY-MM-DD (default today)"""
    day = query_date(request.query_params, 'date', default=today())
    return ok(services.profit_statistics(day))
