"""
Collection balance side effects and collection endpoints.
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework.exceptions import ValidationError

from accounts.models import User
from core.exceptions import BusinessRuleViolation, InvalidMember
from core.testing import auth_client, make_customer, make_scheme, make_user
from customers import services as customer_services
from customers.models import CustomerScheme
from ledger import services
from ledger.models import Collection


class CollectionBalanceTests(TestCase):
    def setUp(self):
        self.collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR)
        self.scheme = make_scheme()
        self.customer = make_customer()
        # 450 x 100 = 45000
        self.enrollment = customer_services.enroll(self.customer.id, self.scheme.id, Decimal('450'), 100)

    def _balance(self):
        return CustomerScheme.objects.get(pk=self.enrollment.pk).balance

    def _record(self, amount='500', balance='44500', **extra):
        return services.record_collection(
            customer_id=self.customer.id,
            collector=self.collector,
            amount_paid=Decimal(amount),
            date=date(2024, 1, 2),
            balance_remaining=Decimal(balance),
            **extra,
        )

    def test_record_then_delete_restores_balance(self):
        self.assertEqual(self._balance(), Decimal('45000.00'))
        collection = self._record()
        self.assertEqual(self._balance(), Decimal('44500.00'))
        services.delete_collection(collection.id)
        self.assertEqual(self._balance(), Decimal('45000.00'))
        self.assertFalse(Collection.objects.filter(pk=collection.pk).exists())

    def test_update_overwrites_balance(self):
        collection = self._record()
        services.update_collection(collection.id, amount_paid=Decimal('600'), balance_remaining=Decimal('44400'))
        self.assertEqual(self._balance(), Decimal('44400.00'))

    def test_update_without_balance_keeps_balance(self):
        collection = self._record()
        services.update_collection(collection.id, remarks='late evening')
        self.assertEqual(self._balance(), Decimal('44500.00'))

    def test_single_enrollment_is_resolved(self):
        collection = self._record()
        self.assertEqual(collection.customer_scheme_id, self.enrollment.id)

    def test_several_enrollments_need_explicit_id(self):
        other = make_scheme(name='Other')
        customer_services.enroll(self.customer.id, other.id, Decimal('100'), 100)
        with self.assertRaises(ValidationError):
            self._record()
        collection = self._record(customer_scheme_id=self.enrollment.id)
        self.assertEqual(collection.customer_scheme_id, self.enrollment.id)

    def test_not_enrolled_customer(self):
        stranger = make_customer(name='Stranger', mobile='9000000077')
        with self.assertRaises(BusinessRuleViolation):
            services.record_collection(
                customer_id=stranger.id, collector=self.collector, amount_paid=Decimal('100'),
                date=date(2024, 1, 2), balance_remaining=Decimal('0'),
            )

    def test_foreign_enrollment_rejected(self):
        stranger = make_customer(name='Stranger', mobile='9000000077')
        with self.assertRaises(InvalidMember):
            services.record_collection(
                customer_id=stranger.id, collector=self.collector, amount_paid=Decimal('100'),
                date=date(2024, 1, 2), balance_remaining=Decimal('0'),
                customer_scheme_id=self.enrollment.id,
            )

    def test_drift_detection_and_reconcile(self):
        self._record(amount='500', balance='40000')
        drift = list(services.find_balance_drift())
        self.assertEqual(len(drift), 1)
        _, stored, derived = drift[0]
        self.assertEqual(stored, Decimal('40000.00'))
        self.assertEqual(derived, Decimal('44500.00'))
        services.reconcile_balance(self.enrollment.id)
        self.assertEqual(self._balance(), Decimal('44500.00'))
        self.assertEqual(list(services.find_balance_drift()), [])


class CollectionAPITests(TestCase):
    def setUp(self):
        self.collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR, name='Murugan')
        self.client = auth_client(self.collector)
        self.scheme = make_scheme(name='Daily 45K')
        self.customer = make_customer()
        self.enrollment = customer_services.enroll(self.customer.id, self.scheme.id, Decimal('450'), 100)

    def test_record_collection(self):
        response = self.client.post('/api/collections', {
            'customerId': self.customer.id,
            'amountPaid': 500,
            'date': '2024-01-02',
            'balanceRemaining': 44500,
            'paymentMethod': 'UPI',
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()['data']
        self.assertEqual(data['collectorId'], self.collector.id)
        self.assertEqual(data['schemeName'], 'Daily 45K')
        self.assertEqual(data['amountPaid'], 500.0)

    def test_delete_returns_restored_balance(self):
        collection = services.record_collection(
            customer_id=self.customer.id, collector=self.collector, amount_paid=Decimal('500'),
            date=date(2024, 1, 2), balance_remaining=Decimal('44500'),
        )
        response = self.client.delete(f'/api/collections/{collection.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['balance'], 45000.0)

    def test_negative_amount_rejected(self):
        response = self.client.post('/api/collections', {
            'customerId': self.customer.id,
            'amountPaid': -1,
            'date': '2024-01-02',
            'balanceRemaining': 44500,
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_daily_stats(self):
        for amount, balance in (('500', '44500'), ('0', '44500')):
            services.record_collection(
                customer_id=self.customer.id, collector=self.collector, amount_paid=Decimal(amount),
                date=date(2024, 1, 2), balance_remaining=Decimal(balance),
            )
        response = self.client.get('/api/collections/stats/daily', {'date': '2024-01-02'})
        data = response.json()['data']
        self.assertEqual(data['totalCollected'], 500.0)
        self.assertEqual(data['paidMembers'], 1)
        self.assertEqual(data['pendingMembers'], 1)
        self.assertEqual(data['collectionsByMethod'], [{'method': 'CASH', 'amount': 500.0, 'count': 2}])

    def test_range_stats_requires_ordered_dates(self):
        response = self.client.get('/api/collections/stats/range', {
            'startDate': '2024-02-01', 'endDate': '2024-01-01',
        })
        self.assertEqual(response.status_code, 400)

    def test_range_stats_by_week(self):
        # 2024-01-02 is a Tuesday, 2024-01-08 a Monday
        for day in (date(2024, 1, 2), date(2024, 1, 6), date(2024, 1, 8)):
            services.record_collection(
                customer_id=self.customer.id, collector=self.collector, amount_paid=Decimal('450'),
                date=day, balance_remaining=Decimal('40000'),
            )
        response = self.client.get('/api/collections/stats/range', {
            'startDate': '2024-01-01', 'endDate': '2024-01-31', 'groupBy': 'week',
        })
        buckets = response.json()['data']['buckets']
        self.assertEqual([b['date'] for b in buckets], ['2023-12-31', '2024-01-07'])
        self.assertEqual(buckets[0]['totalCollections'], 2)
        self.assertEqual(buckets[0]['byGroup']['Daily 45K']['amount'], 900.0)
