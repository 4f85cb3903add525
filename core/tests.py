"""
Shared helpers and the response envelope.
"""
from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory

from config.exceptions import _flatten_errors, custom_exception_handler
from core.exceptions import CapacityExceeded, ResourceNotFound
from core.sorting import resolve_ordering
from core.testing import auth_client, make_scheme, make_user
from core.utils import add_months, end_date_for, money, percent, query_int
from schemes.models import ChitScheme


class UtilsTests(SimpleTestCase):
    def test_add_months_clamps(self):
        self.assertEqual(add_months(date(2024, 1, 31), 1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2023, 11, 30), 3), date(2024, 2, 29))
        self.assertEqual(add_months(date(2024, 5, 15), 12), date(2025, 5, 15))

    def test_end_date_days(self):
        self.assertEqual(end_date_for(date(2024, 1, 1), 10, 'DAYS'), date(2024, 1, 11))

    def test_percent_rounds_half_up(self):
        self.assertEqual(percent(1, 8), 13)
        self.assertEqual(percent(1, 3, digits=1), 33.3)
        self.assertEqual(percent(5, 0), 0)

    def test_money(self):
        self.assertEqual(money(Decimal('10.005')), Decimal('10.01'))
        self.assertEqual(money(None), Decimal('0.00'))

    def test_query_int_bounds(self):
        self.assertEqual(query_int({'limit': '5'}, 'limit', min_value=1), 5)
        self.assertIsNone(query_int({}, 'limit'))
        with self.assertRaises(ValidationError):
            query_int({'limit': 'abc'}, 'limit')
        with self.assertRaises(ValidationError):
            query_int({'limit': '0'}, 'limit', min_value=1)


class SortingTests(SimpleTestCase):
    allowed = {'createdAt': 'created_at', 'name': 'name'}

    def test_default_is_newest_first(self):
        self.assertEqual(resolve_ordering({}, self.allowed), '-created_at')

    def test_ascending(self):
        self.assertEqual(resolve_ordering({'sortBy': 'name', 'sortOrder': 'asc'}, self.allowed), 'name')

    def test_unknown_key(self):
        with self.assertRaises(ValidationError):
            resolve_ordering({'sortBy': 'password'}, self.allowed)

    def test_unknown_order(self):
        with self.assertRaises(ValidationError):
            resolve_ordering({'sortOrder': 'sideways'}, self.allowed)


class ExceptionHandlerTests(SimpleTestCase):
    def setUp(self):
        self.context = {'request': APIRequestFactory().get('/api/customers')}

    def test_validation_errors_flattened(self):
        response = custom_exception_handler(
            ValidationError({'name': ['Too short'], 'schemes': [{'amount': ['Required']}]}),
            self.context,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Validation failed')
        self.assertEqual(response.data['errors'], [
            {'field': 'name', 'message': 'Too short'},
            {'field': 'schemes.amount', 'message': 'Required'},
        ])

    def test_business_rule(self):
        response = custom_exception_handler(CapacityExceeded(), self.context)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'success': False, 'message': 'Chit scheme is full'})

    def test_not_found(self):
        response = custom_exception_handler(ResourceNotFound('Customer'), self.context)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['message'], 'Customer not found')

    @override_settings(DEBUG=False)
    def test_database_error_hides_detail(self):
        response = custom_exception_handler(IntegrityError('duplicate key secret_column'), self.context)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Database Error')
        self.assertNotIn('secret_column', response.data['error'])

    @override_settings(DEBUG=True)
    def test_database_error_detail_in_debug(self):
        response = custom_exception_handler(IntegrityError('duplicate key'), self.context)
        self.assertEqual(response.data['error'], 'duplicate key')

    @override_settings(DEBUG=False)
    def test_unknown_error_is_500_without_detail(self):
        response = custom_exception_handler(RuntimeError('boom'), self.context)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'success': False, 'message': 'Internal Server Error'})

    def test_flatten_plain_string(self):
        self.assertEqual(_flatten_errors('oops'), [{'field': 'non_field_errors', 'message': 'oops'}])


class EnvelopeTests(TestCase):
    def test_health_needs_no_auth(self):
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'OK')

    def test_unknown_route(self):
        response = self.client.get('/api/does-not-exist')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'message': 'Route not found'})

    def test_method_not_allowed(self):
        client = auth_client(make_user())
        response = client.patch('/api/chit-schemes', {}, format='json')
        self.assertEqual(response.status_code, 405)
        self.assertFalse(response.json()['success'])

    def test_unexpected_error_is_500_envelope(self):
        client = auth_client(make_user())
        scheme = make_scheme()
        with mock.patch('schemes.views.services.scheme_stats', side_effect=RuntimeError('boom')):
            response = client.get(f'/api/chit-schemes/{scheme.id}/stats')
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])
        self.assertEqual(ChitScheme.objects.count(), 1)
