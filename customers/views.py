"""
Customer and enrollment views
"""
import logging

from django.db.models import Count, Prefetch, Q, Sum
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAgentOrAdmin, ReadOnly
from core.exceptions import ResourceNotFound
from core.pagination import paginate
from core.responses import created, ok
from core.sorting import resolve_ordering
from core.utils import query_choice, query_int
from .models import Customer, CustomerScheme
from .serializers import (
    STATUS_CHOICES,
    CustomerCreateSerializer,
    CustomerSerializer,
    EnrollmentCreateSerializer,
    EnrollmentSerializer,
    EnrollmentUpdateSerializer,
)
from . import services

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'name': 'name',
    'mobile': 'mobile',
    'status': 'status',
}


def _customers_queryset():
    return Customer.objects.prefetch_related(
        Prefetch('enrollments', queryset=CustomerScheme.objects.select_related('scheme').order_by('enrolled_at'))
    )


def _get_customer(pk):
    try:
        return _customers_queryset().get(pk=pk)
    except Customer.DoesNotExist:
        raise ResourceNotFound('Customer')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def customers_list_or_create_view(request):
    """
    GET /api/customers
    Query params: page, limit, sortBy, sortOrder, status, schemeId, search (name / mobile / address)
    POST /api/customers - create, optionally enrolling in schemeId at once
    """
    if request.method == 'POST':
        serializer = CustomerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer_fields, enrollment = serializer.split()
        customer = services.create_customer(enrollment_data=enrollment, **customer_fields)
        return created(CustomerSerializer(_get_customer(customer.pk)).data, message='Customer created successfully')

    params = request.query_params
    qs = _customers_queryset()
    status_filter = query_choice(params, 'status', STATUS_CHOICES)
    if status_filter:
        qs = qs.filter(status=status_filter)
    scheme_id = query_int(params, 'schemeId', min_value=1)
    if scheme_id:
        qs = qs.filter(enrollments__scheme_id=scheme_id)
    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(
            Q(name__icontains=search) | Q(mobile__icontains=search) | Q(address__icontains=search)
        )
    qs = qs.distinct().order_by(resolve_ordering(params, SORT_FIELDS), 'id')
    return paginate(qs, request, CustomerSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def customer_detail_view(request, pk):
    """
    GET /api/customers/{id}
    PUT /api/customers/{id} - personal details and status (enrollment terms: PATCH /customers/schemes/{id})
    DELETE /api/customers/{id} - only customers without collections or passbook entries
    """
    if request.method == 'DELETE':
        services.delete_customer(pk)
        return ok(message='Customer deleted successfully')

    customer = _get_customer(pk)
    if request.method == 'GET':
        return ok(CustomerSerializer(customer).data)

    serializer = CustomerSerializer(customer, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    logger.info('[CUSTOMER] updated customer_id=%s', customer.pk)
    return ok(CustomerSerializer(_get_customer(pk)).data, message='Customer updated successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def customer_schemes_view(request, pk):
    """
    GET /api/customers/{id}/schemes - enrollments of a customer
    POST /api/customers/{id}/schemes - enroll in another scheme
    """
    customer = _get_customer(pk)
    if request.method == 'GET':
        enrollments = services.get_enrollments_for_customer(customer).order_by('enrolled_at')
        return ok(EnrollmentSerializer(enrollments, many=True).data)

    serializer = EnrollmentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    enrollment = services.enroll(customer_id=customer.pk, **serializer.validated_data)
    enrollment = CustomerScheme.objects.select_related('scheme').get(pk=enrollment.pk)
    return created(EnrollmentSerializer(enrollment).data, message='Customer enrolled successfully')


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsAgentOrAdmin])
def enrollment_detail_view(request, pk):
    """
    GET /api/customers/schemes/{customerSchemeId}
    PATCH - status (ACTIVE/COMPLETED/DEFAULTED) and terms
    DELETE - unenroll
    """
    if request.method == 'DELETE':
        services.unenroll(pk)
        return ok(message='Customer removed from chit scheme')

    if request.method == 'PATCH':
        serializer = EnrollmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update_enrollment(pk, **serializer.validated_data)

    try:
        enrollment = CustomerScheme.objects.select_related('scheme').get(pk=pk)
    except CustomerScheme.DoesNotExist:
        raise ResourceNotFound('Customer scheme')
    return ok(EnrollmentSerializer(enrollment).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_stats_view(request):
    """GET /api/customers/stats/overview?schemeId="""
    scheme_id = query_int(request.query_params, 'schemeId', min_value=1)
    customers = Customer.objects.all()
    enrollments = CustomerScheme.objects.all()
    if scheme_id:
        customers = customers.filter(enrollments__scheme_id=scheme_id).distinct()
        enrollments = enrollments.filter(scheme_id=scheme_id)

    counts = customers.aggregate(
        total=Count('id', distinct=True),
        active=Count('id', distinct=True, filter=Q(status=Customer.STATUS_ACTIVE)),
        completed=Count('id', distinct=True, filter=Q(status=Customer.STATUS_COMPLETED)),
        defaulted=Count('id', distinct=True, filter=Q(status=Customer.STATUS_DEFAULTED)),
    )
    total_balance = enrollments.aggregate(total=Sum('balance'))['total'] or 0
    total_amount = sum((e.contracted_amount for e in enrollments), 0)
    return ok({
        'totalCustomers': counts['total'],
        'activeCustomers': counts['active'],
        'completedCustomers': counts['completed'],
        'defaultedCustomers': counts['defaulted'],
        'totalEnrollments': enrollments.count(),
        'totalAmount': float(total_amount),
        'totalBalance': float(total_balance),
        'totalCollected': float(total_amount - total_balance),
    })
