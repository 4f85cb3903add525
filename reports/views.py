"""
Report views. Every report is read-only: fetch rows here, aggregate in reports.services.
"""
import calendar
import logging
from collections import defaultdict
from datetime import date

from django.db.models import Count, Q, Sum
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from auctions.models import Auction
from core.responses import ok
from core.utils import query_choice, query_date, query_date_range, query_int, today
from customers.models import Customer, CustomerScheme
from ledger.models import Collection
from schemes.models import ChitScheme
from . import services

logger = logging.getLogger(__name__)

CUSTOMER_STATUSES = [c[0] for c in Customer.STATUS_CHOICES]
SCHEME_STATUSES = [c[0] for c in ChitScheme.STATUS_CHOICES]

# sortBy keys accepted by the customer performance report
CUSTOMER_PERFORMANCE_SORT = (
    'totalPaid',
    'totalAmount',
    'remainingBalance',
    'progressPercentage',
    'averagePayment',
    'consistencyPercentage',
    'totalCollections',
)

SCHEME_ROW_FIELDS = ('id', 'name', 'chit_value', 'number_of_members', 'members_enrolled', 'status')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_overview_view(request):
    """GET /api/reports/dashboard/overview"""
    schemes = ChitScheme.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status=ChitScheme.STATUS_ACTIVE)),
    )
    customers = Customer.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status=Customer.STATUS_ACTIVE)),
    )
    collections = Collection.objects.aggregate(
        total=Count('id'),
        pending=Count('id', filter=Q(amount_paid=0)),
        revenue=Sum('amount_paid'),
    )
    return ok({
        'overview': {
            'schemes': {
                'total': schemes['total'],
                'active': schemes['active'],
                'completed': schemes['total'] - schemes['active'],
            },
            'customers': {
                'total': customers['total'],
                'active': customers['active'],
                'completed': customers['total'] - customers['active'],
            },
            'collections': {
                'total': collections['total'],
                'pending': collections['pending'],
                'completed': collections['total'] - collections['pending'],
            },
            'auctions': {'total': Auction.objects.count()},
            'revenue': {'total': float(collections['revenue'] or 0)},
        }
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def revenue_view(request):
    """GET /api/reports/revenue?startDate&endDate&groupBy=day|week|month&schemeId"""
    params = request.query_params
    start, end = query_date_range(params)
    group_by = query_choice(params, 'groupBy', services.GROUP_BY_CHOICES, default='day')
    qs = Collection.objects.filter(date__gte=start, date__lte=end)
    scheme_id = query_int(params, 'schemeId', min_value=1)
    if scheme_id:
        qs = qs.filter(customer_scheme__scheme_id=scheme_id)
    rows = list(qs.order_by('date', 'id').values(*services.COLLECTION_ROW_FIELDS))
    buckets = services.revenue_buckets(rows, group_by)
    return ok({
        'startDate': start.isoformat(),
        'endDate': end.isoformat(),
        'groupBy': group_by,
        'revenueData': buckets,
        'totalRevenue': sum(b['totalRevenue'] for b in buckets),
        'totalCollections': len(rows),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_performance_view(request):
    """GET /api/reports/customers/performance?schemeId&status&sortBy=totalPaid&sortOrder=desc"""
    params = request.query_params
    sort_by = params.get('sortBy') or 'totalPaid'
    if sort_by not in CUSTOMER_PERFORMANCE_SORT:
        raise ValidationError({'sortBy': [f'Must be one of: {", ".join(CUSTOMER_PERFORMANCE_SORT)}']})
    sort_order = query_choice(params, 'sortOrder', ('asc', 'desc'), default='desc')

    customers = Customer.objects.all()
    scheme_id = query_int(params, 'schemeId', min_value=1)
    if scheme_id:
        customers = customers.filter(enrollments__scheme_id=scheme_id).distinct()
    status_filter = query_choice(params, 'status', CUSTOMER_STATUSES)
    if status_filter:
        customers = customers.filter(status=status_filter)
    customer_rows = list(customers.order_by('id').values('id', 'name', 'mobile', 'status'))
    ids = [row['id'] for row in customer_rows]

    enrollments = defaultdict(list)
    for row in CustomerScheme.objects.filter(customer_id__in=ids).values(
        'customer_id', 'amount_per_day', 'duration', 'balance', 'start_date',
    ):
        enrollments[row['customer_id']].append(row)
    collections = defaultdict(list)
    for row in Collection.objects.filter(customer_id__in=ids).values('customer_id', 'date', 'amount_paid'):
        collections[row['customer_id']].append(row)

    day = today()
    performance = [
        services.customer_performance(row, enrollments[row['id']], collections[row['id']], day)
        for row in customer_rows
    ]
    performance.sort(key=lambda item: item[sort_by], reverse=(sort_order == 'desc'))
    return ok({'performanceData': performance})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scheme_performance_view(request):
    """GET /api/reports/schemes/performance?status"""
    schemes = ChitScheme.objects.all()
    status_filter = query_choice(request.query_params, 'status', SCHEME_STATUSES)
    if status_filter:
        schemes = schemes.filter(status=status_filter)
    scheme_rows = list(schemes.order_by('id').values(*SCHEME_ROW_FIELDS))
    ids = [row['id'] for row in scheme_rows]

    enrollments = defaultdict(list)
    for row in CustomerScheme.objects.filter(scheme_id__in=ids).values(
        'scheme_id', 'status', 'amount_per_day', 'duration', 'balance',
    ):
        enrollments[row['scheme_id']].append(row)
    auctions = defaultdict(list)
    for row in Auction.objects.filter(chit_scheme_id__in=ids).values(
        'chit_scheme_id', 'status', 'amount_received', 'discount_amount',
    ):
        auctions[row['chit_scheme_id']].append(row)

    return ok({
        'schemePerformance': [
            services.scheme_performance(row, enrollments[row['id']], auctions[row['id']])
            for row in scheme_rows
        ]
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def collection_efficiency_view(request):
    """GET /api/reports/collections/efficiency?startDate&endDate&collectorId"""
    params = request.query_params
    start, end = query_date_range(params)
    qs = Collection.objects.filter(date__gte=start, date__lte=end)
    collector_id = query_int(params, 'collectorId', min_value=1)
    if collector_id:
        qs = qs.filter(collector_id=collector_id)
    rows = qs.order_by('collector_id', 'date').values(*services.COLLECTION_ROW_FIELDS)
    return ok({'efficiencyData': services.collector_efficiency(rows)})


def _collection_rows(start, end):
    return Collection.objects.filter(date__gte=start, date__lte=end).values('customer_id', 'amount_paid')


def _defaulters(**last_date_filter):
    return Customer.objects.filter(status=Customer.STATUS_DEFAULTED, **last_date_filter).count()


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_report_view(request):
    """GET /api/reports/daily?date (default today); defaulters lapsed before the day"""
    day = query_date(request.query_params, 'date', default=today())
    report = services.period_collection_report(
        _collection_rows(day, day),
        _defaulters(last_date__lt=day),
        date=day.isoformat(),
    )
    return ok(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_report_view(request):
    """GET /api/reports/monthly?year&month (default current month)"""
    current = today()
    year = query_int(request.query_params, 'year', default=current.year, min_value=1900, max_value=9999)
    month = query_int(request.query_params, 'month', default=current.month, min_value=1, max_value=12)
    start = date(year, month, 1)
    end = date(year, month, calendar.monthrange(year, month)[1])
    report = services.period_collection_report(
        _collection_rows(start, end),
        _defaulters(last_date__gte=start, last_date__lte=end),
        year=year,
        month=month,
    )
    return ok(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def yearly_report_view(request):
    """GET /api/reports/yearly?year (default current year)"""
    year = query_int(request.query_params, 'year', default=today().year, min_value=1900, max_value=9999)
    start, end = date(year, 1, 1), date(year, 12, 31)
    report = services.period_collection_report(
        _collection_rows(start, end),
        _defaulters(last_date__gte=start, last_date__lte=end),
        year=year,
    )
    return ok(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_customers_view(request):
    """GET /api/reports/top-customers?limit=10 - most collections first"""
    limit = query_int(request.query_params, 'limit', default=10, min_value=1, max_value=100)
    customers = list(
        Customer.objects.annotate(
            collection_count=Count('collections', distinct=True),
            total_paid=Sum('collections__amount_paid'),
        ).order_by('-collection_count', 'id')[:limit]
    )
    contracted = defaultdict(lambda: services.ZERO)
    for enrollment in CustomerScheme.objects.filter(customer__in=customers).only(
        'customer_id', 'amount_per_day', 'duration',
    ):
        contracted[enrollment.customer_id] += enrollment.contracted_amount

    data = []
    for customer in customers:
        total_paid = customer.total_paid or services.ZERO
        data.append({
            'id': customer.pk,
            'name': customer.name,
            'status': customer.status,
            'totalCollections': customer.collection_count,
            'totalPaid': float(total_paid),
            'balance': float(max(contracted[customer.pk] - total_paid, services.ZERO)),
        })
    return ok(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scheme_collection_summary_view(request):
    """GET /api/reports/scheme-performance - collected share of each scheme's pool"""
    collected = {
        row['customer_scheme__scheme_id']: row['total']
        for row in Collection.objects.order_by()
        .values('customer_scheme__scheme_id')
        .annotate(total=Sum('amount_paid'))
    }
    schemes = ChitScheme.objects.order_by('id').values(*SCHEME_ROW_FIELDS)
    return ok([
        services.scheme_collection_summary(scheme, collected.get(scheme['id']))
        for scheme in schemes
    ])
