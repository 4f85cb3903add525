"""
Report reducers (no database) and report endpoints.
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework.exceptions import ValidationError

from accounts.models import User
from core.testing import auth_client, make_customer, make_scheme, make_user
from core.utils import today
from customers import services as customer_services
from customers.models import Customer
from ledger import services as ledger_services
from reports import services


def row(day, amount, method='CASH', scheme='Gold', collector_id=1, customer_id=1):
    return {
        'id': None,
        'date': day,
        'amount_paid': Decimal(amount),
        'payment_method': method,
        'customer_id': customer_id,
        'collector_id': collector_id,
        'collector__name': f'Collector {collector_id}',
        'customer_scheme__scheme_id': 1,
        'customer_scheme__scheme__name': scheme,
    }


class BucketKeyTests(SimpleTestCase):
    def test_day(self):
        self.assertEqual(services.bucket_key(date(2024, 3, 5), 'day'), '2024-03-05')

    def test_week_starts_on_sunday(self):
        # 2024-03-05 is a Tuesday
        self.assertEqual(services.bucket_key(date(2024, 3, 5), 'week'), '2024-03-03')
        self.assertEqual(services.bucket_key(date(2024, 3, 3), 'week'), '2024-03-03')
        self.assertEqual(services.bucket_key(date(2024, 3, 9), 'week'), '2024-03-03')

    def test_month(self):
        self.assertEqual(services.bucket_key(date(2024, 3, 5), 'month'), '2024-03')

    def test_unknown_group(self):
        with self.assertRaises(ValidationError):
            services.bucket_key(date(2024, 3, 5), 'quarter')


class ReducerTests(SimpleTestCase):
    def test_revenue_buckets_sorted(self):
        rows = [
            row(date(2024, 1, 3), '300'),
            row(date(2024, 1, 1), '100'),
            row(date(2024, 1, 2), '200', method='UPI'),
        ]
        buckets = services.revenue_buckets(rows, 'day')
        self.assertEqual([b['date'] for b in buckets], ['2024-01-01', '2024-01-02', '2024-01-03'])
        self.assertTrue(all(b['totalCollections'] == 1 for b in buckets))
        self.assertEqual(buckets[1]['byPaymentMethod'], {'UPI': {'amount': 200.0, 'count': 1}})
        self.assertEqual(buckets[2]['byScheme']['Gold']['amount'], 300.0)

    def test_collector_efficiency(self):
        rows = [
            row(date(2024, 1, 1), '100', collector_id=1),
            row(date(2024, 1, 2), '0', collector_id=1),
            row(date(2024, 1, 3), '100', collector_id=1),
            row(date(2024, 1, 1), '50', collector_id=2),
        ]
        result = {r['collector']['id']: r for r in services.collector_efficiency(rows)}
        self.assertEqual(result[1]['totalCollections'], 3)
        self.assertEqual(result[1]['pendingCollections'], 1)
        self.assertEqual(result[1]['efficiency'], 67)
        self.assertEqual(result[2]['efficiency'], 100)

    def test_scheme_performance_without_enrollments(self):
        scheme = {
            'id': 1, 'name': 'Empty', 'chit_value': Decimal('100000'), 'number_of_members': 10,
            'members_enrolled': 0, 'status': 'ACTIVE',
        }
        result = services.scheme_performance(scheme, [], [])
        self.assertEqual(result['collectionRate'], 0)
        self.assertEqual(result['enrollmentRate'], 0)
        self.assertEqual(result['averageDiscount'], 0)

    def test_customer_performance(self):
        customer = {'id': 1, 'name': 'A', 'mobile': '9000000001', 'status': 'ACTIVE'}
        enrollments = [{
            'amount_per_day': Decimal('100'), 'duration': 10, 'balance': Decimal('700'),
            'start_date': date(2024, 1, 1),
        }]
        collections = [
            {'date': date(2024, 1, 1), 'amount_paid': Decimal('100')},
            {'date': date(2024, 1, 2), 'amount_paid': Decimal('200')},
        ]
        result = services.customer_performance(customer, enrollments, collections, date(2024, 1, 5))
        self.assertEqual(result['totalPaid'], 300.0)
        self.assertEqual(result['progressPercentage'], 30)
        self.assertEqual(result['averagePayment'], 150.0)
        # 2 paying days out of 4 elapsed
        self.assertEqual(result['consistencyPercentage'], 50)
        self.assertEqual(result['lastPaymentDate'], '2024-01-02')

    def test_period_report_rate_has_one_decimal(self):
        rows = [row(date(2024, 1, 1), '100'), row(date(2024, 1, 1), '100'), row(date(2024, 1, 1), '0')]
        report = services.period_collection_report(rows, defaulters=2, date='2024-01-01')
        self.assertEqual(report['paidMembers'], 2)
        self.assertEqual(report['pendingMembers'], 1)
        self.assertEqual(report['collectionRate'], 66.7)
        self.assertEqual(report['defaulters'], 2)

    def test_scheme_collection_summary(self):
        scheme = {
            'id': 1, 'name': 'Gold', 'chit_value': Decimal('1000'), 'number_of_members': 3,
            'members_enrolled': 2, 'status': 'ACTIVE',
        }
        self.assertEqual(services.scheme_collection_summary(scheme, Decimal('1000'))['collection'], 33.3)
        self.assertEqual(services.scheme_collection_summary(scheme, None)['collection'], 0.0)


class ReportAPITests(TestCase):
    def setUp(self):
        self.collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR, name='Murugan')
        self.client = auth_client(self.collector)
        self.scheme = make_scheme(name='Gold')
        self.customer = make_customer()
        self.enrollment = customer_services.enroll(self.customer.id, self.scheme.id, Decimal('500'), 100)

    def _collect(self, day, amount):
        ledger_services.record_collection(
            customer_id=self.customer.id, collector=self.collector, amount_paid=Decimal(amount),
            date=day, balance_remaining=Decimal('49000'),
        )

    def test_revenue_three_days(self):
        self._collect(date(2024, 1, 3), '300')
        self._collect(date(2024, 1, 1), '100')
        self._collect(date(2024, 1, 2), '200')
        response = self.client.get('/api/reports/revenue', {
            'startDate': '2024-01-01', 'endDate': '2024-01-03', 'groupBy': 'day',
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual([b['date'] for b in data['revenueData']], ['2024-01-01', '2024-01-02', '2024-01-03'])
        self.assertEqual([b['totalCollections'] for b in data['revenueData']], [1, 1, 1])
        self.assertEqual(data['totalRevenue'], 600.0)

    def test_revenue_requires_dates(self):
        response = self.client.get('/api/reports/revenue')
        self.assertEqual(response.status_code, 400)
        fields = {e['field'] for e in response.json()['errors']}
        self.assertIn('startDate', fields)

    def test_revenue_rejects_unknown_group(self):
        response = self.client.get('/api/reports/revenue', {
            'startDate': '2024-01-01', 'endDate': '2024-01-03', 'groupBy': 'hour',
        })
        self.assertEqual(response.status_code, 400)

    def test_dashboard(self):
        self._collect(date(2024, 1, 1), '100')
        self._collect(date(2024, 1, 2), '0')
        overview = self.client.get('/api/reports/dashboard/overview').json()['data']['overview']
        self.assertEqual(overview['collections'], {'total': 2, 'pending': 1, 'completed': 1})
        self.assertEqual(overview['revenue']['total'], 100.0)
        self.assertEqual(overview['schemes']['active'], 1)

    def test_efficiency(self):
        self._collect(date(2024, 1, 1), '100')
        self._collect(date(2024, 1, 2), '0')
        response = self.client.get('/api/reports/collections/efficiency', {
            'startDate': '2024-01-01', 'endDate': '2024-01-31',
        })
        data = response.json()['data']['efficiencyData']
        self.assertEqual(data[0]['collector'], {'id': self.collector.id, 'name': 'Murugan'})
        self.assertEqual(data[0]['efficiency'], 50)

    def test_customer_performance_sort_allow_list(self):
        response = self.client.get('/api/reports/customers/performance', {'sortBy': 'name; DROP'})
        self.assertEqual(response.status_code, 400)
        response = self.client.get('/api/reports/customers/performance', {'sortBy': 'totalPaid'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['data']['performanceData']), 1)

    def test_schemes_performance(self):
        response = self.client.get('/api/reports/schemes/performance')
        data = response.json()['data']['schemePerformance']
        self.assertEqual(data[0]['members']['active'], 1)
        self.assertEqual(data[0]['totalExpected'], 50000.0)
        self.assertEqual(data[0]['enrollmentRate'], 10)

    def test_daily_report_defaulters(self):
        make_customer(
            name='Lapsed', mobile='9000000055', status=Customer.STATUS_DEFAULTED,
            last_date=today() - timedelta(days=10),
        )
        self._collect(today(), '500')
        data = self.client.get('/api/reports/daily').json()['data']
        self.assertEqual(data['totalCollection'], 500.0)
        self.assertEqual(data['defaulters'], 1)
        self.assertEqual(data['collectionRate'], 100.0)

    def test_monthly_and_yearly(self):
        self._collect(date(2024, 2, 10), '500')
        monthly = self.client.get('/api/reports/monthly', {'year': 2024, 'month': 2}).json()['data']
        self.assertEqual(monthly['totalCollection'], 500.0)
        self.assertEqual(monthly['month'], 2)
        yearly = self.client.get('/api/reports/yearly', {'year': 2024}).json()['data']
        self.assertEqual(yearly['paidMembers'], 1)
        response = self.client.get('/api/reports/monthly', {'year': 2024, 'month': 13})
        self.assertEqual(response.status_code, 400)

    def test_top_customers(self):
        self._collect(date(2024, 1, 1), '1000')
        data = self.client.get('/api/reports/top-customers', {'limit': 5}).json()['data']
        self.assertEqual(data[0]['totalPaid'], 1000.0)
        self.assertEqual(data[0]['balance'], 49000.0)

    def test_scheme_collection_summary(self):
        self._collect(date(2024, 1, 1), '10000')
        data = self.client.get('/api/reports/scheme-performance').json()['data']
        # 10000 of 100000 x 10 members
        self.assertEqual(data[0]['collection'], 1.0)
        self.assertEqual(data[0]['enrolled'], 1)
