"""
Passbook: manual entry rules, generation from collections, summary and profit statistics.
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings

from accounts.models import User
from core.exceptions import BusinessRuleViolation, ImmutableRecord
from core.testing import auth_client, make_customer, make_scheme, make_user
from customers import services as customer_services
from ledger import services as ledger_services
from passbook import services
from passbook.models import PassbookEntry
from schemes.models import ChitScheme


def manual_fields(month=1, day=date(2024, 1, 5), amount='500'):
    return {
        'month': month,
        'date': day,
        'daily_payment': Decimal('500'),
        'amount': Decimal(amount),
        'chitti_amount': Decimal('50000'),
        'payment_method': 'CASH',
    }


class PassbookServiceTests(TestCase):
    def setUp(self):
        self.collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR)
        self.scheme = make_scheme(start_date=date(2024, 1, 1))
        self.customer = make_customer()
        self.enrollment = customer_services.enroll(
            self.customer.id, self.scheme.id, Decimal('500'), 100,
            start_date=date(2024, 1, 1), duration_type=ChitScheme.DURATION_DAYS,
        )

    def _collect(self, day, amount='500'):
        return ledger_services.record_collection(
            customer_id=self.customer.id, collector=self.collector, amount_paid=Decimal(amount),
            date=day, balance_remaining=Decimal('40000'),
        )

    def test_duplicate_manual_entry_for_month(self):
        services.create_manual_entry(self.enrollment.id, **manual_fields())
        with self.assertRaises(BusinessRuleViolation):
            services.create_manual_entry(self.enrollment.id, **manual_fields(day=date(2024, 1, 6)))
        self.assertEqual(PassbookEntry.objects.count(), 1)

    def test_manual_entry_resolved_from_customer(self):
        entry = services.create_manual_entry(customer_id=self.customer.id, **manual_fields())
        self.assertEqual(entry.customer_scheme_id, self.enrollment.id)
        self.assertEqual(entry.type, PassbookEntry.TYPE_MANUAL)

    def test_generate_groups_by_collection_date(self):
        self._collect(date(2024, 1, 2))
        self._collect(date(2024, 1, 2), amount='100')
        self._collect(date(2024, 2, 5))

        created = services.generate_entries(self.enrollment.id)

        self.assertEqual(created, 2)
        first, second = PassbookEntry.objects.order_by('date')
        self.assertEqual(first.amount, Decimal('600.00'))
        self.assertEqual(first.month, 1)
        # 2024-02-05 is day 35 of a DAYS enrollment: second 30-day period
        self.assertEqual(second.month, 2)
        self.assertEqual(second.chitti_amount, Decimal('50000.00'))
        self.assertTrue(all(e.is_generated for e in (first, second)))

    def test_generate_is_idempotent(self):
        self._collect(date(2024, 1, 2))
        self.assertEqual(services.generate_entries(self.enrollment.id), 1)
        self.assertEqual(services.generate_entries(self.enrollment.id), 0)
        self.assertEqual(PassbookEntry.objects.count(), 1)

    def test_generated_entries_are_read_only(self):
        self._collect(date(2024, 1, 2))
        services.generate_entries(self.enrollment.id)
        entry = PassbookEntry.objects.get()
        with self.assertRaises(ImmutableRecord):
            services.update_entry(entry.id, amount=Decimal('1'))
        with self.assertRaises(ImmutableRecord):
            services.delete_entry(entry.id)
        entry.refresh_from_db()
        self.assertEqual(entry.amount, Decimal('500.00'))

    def test_period_index_months(self):
        self.enrollment.duration_type = ChitScheme.DURATION_MONTHS
        self.enrollment.start_date = date(2024, 1, 15)
        self.assertEqual(services.period_index(self.enrollment, date(2024, 1, 15)), 1)
        self.assertEqual(services.period_index(self.enrollment, date(2024, 2, 14)), 1)
        self.assertEqual(services.period_index(self.enrollment, date(2024, 2, 15)), 2)

    def test_summary(self):
        services.create_manual_entry(self.enrollment.id, **manual_fields(amount='500'))
        summary = services.customer_summary(self.customer)
        self.assertEqual(summary['totalEntries'], 1)
        self.assertEqual(summary['manualEntries'], 1)
        self.assertEqual(summary['totalPaid'], 500.0)
        self.assertEqual(summary['totalAmount'], 50000.0)
        self.assertEqual(summary['progressPercentage'], 0)


@override_settings(DEFAULT_COMMISSION_RATE=0.05)
class ProfitStatisticsTests(TestCase):
    def setUp(self):
        self.scheme = make_scheme(daily_payment=Decimal('500'))
        self.paid = customer_services.enroll(
            make_customer(name='Paid', mobile='9000000001').id, self.scheme.id, Decimal('500'), 100,
        )
        self.partial = customer_services.enroll(
            make_customer(name='Partial', mobile='9000000002').id, self.scheme.id, Decimal('500'), 100,
        )
        self.pending = customer_services.enroll(
            make_customer(name='Pending', mobile='9000000003').id, self.scheme.id, Decimal('500'), 100,
        )

    def _entry(self, enrollment, day, amount):
        services.create_manual_entry(enrollment.id, **manual_fields(day=day, amount=amount))

    def test_buckets_and_profit(self):
        day = date(2024, 3, 10)
        self._entry(self.paid, day, '500')
        self._entry(self.partial, day, '200')

        stats = services.profit_statistics(day)

        self.assertEqual(stats['paidCount'], 1)
        self.assertEqual(stats['backlogCount'], 1)
        self.assertEqual(stats['pendingCount'], 1)
        self.assertEqual(stats['totalExpected'], 1500.0)
        self.assertEqual(stats['totalActual'], 700.0)
        self.assertEqual(stats['totalBacklog'], 800.0)
        self.assertEqual(stats['dailyProfit'], 35.0)
        # March has 31 days
        self.assertEqual(stats['monthlyProfit'], 1085.0)

    def test_falls_back_to_previous_day(self):
        self._entry(self.paid, date(2024, 3, 9), '500')
        stats = services.profit_statistics(date(2024, 3, 10))
        self.assertEqual(stats['paidCount'], 1)
        self.assertEqual(stats['paid'][0]['customerName'], 'Paid')

    def test_scheme_commission_rate_wins(self):
        ChitScheme.objects.filter(pk=self.scheme.pk).update(commission_rate=Decimal('0.1'))
        day = date(2024, 3, 10)
        self._entry(self.paid, day, '500')
        self.assertEqual(services.profit_statistics(day)['dailyProfit'], 50.0)


class PassbookAPITests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.client = auth_client(self.user)
        self.scheme = make_scheme()
        self.customer = make_customer()
        self.enrollment = customer_services.enroll(self.customer.id, self.scheme.id, Decimal('500'), 100)

    def _payload(self, **overrides):
        payload = {
            'customerSchemeId': self.enrollment.id,
            'month': 1,
            'date': '2024-01-05',
            'dailyPayment': 500,
            'amount': 500,
            'chittiAmount': 50000,
            'paymentMethod': 'CASH',
        }
        payload.update(overrides)
        return payload

    def test_create_and_duplicate(self):
        response = self.client.post('/api/passbook', self._payload(), format='json')
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['data']['type'], 'MANUAL')

        response = self.client.post('/api/passbook', self._payload(date='2024-01-20'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Manual entry already exists for this month')

    def test_create_requires_target(self):
        response = self.client.post('/api/passbook', self._payload(customerSchemeId=None), format='json')
        self.assertEqual(response.status_code, 400)

    def test_list_filters_and_page_size(self):
        for month in range(1, 4):
            self.client.post('/api/passbook', self._payload(month=month, date=f'2024-0{month}-05'), format='json')
        response = self.client.get(f'/api/passbook/customer/{self.customer.id}', {'month': 2})
        data = response.json()['data']
        self.assertEqual(data['pagination']['limit'], 20)
        self.assertEqual(data['pagination']['total'], 1)
        self.assertEqual(data['items'][0]['month'], 2)

    def test_update_and_delete_manual(self):
        entry = services.create_manual_entry(self.enrollment.id, **manual_fields())
        response = self.client.put(f'/api/passbook/{entry.id}', {'amount': 450}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['amount'], 450.0)
        response = self.client.delete(f'/api/passbook/{entry.id}')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(PassbookEntry.objects.filter(pk=entry.id).exists())

    def test_generated_entry_delete_is_400(self):
        collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR)
        ledger_services.record_collection(
            customer_id=self.customer.id, collector=collector, amount_paid=Decimal('500'),
            date=date(2024, 1, 2), balance_remaining=Decimal('49500'),
        )
        response = self.client.post(f'/api/passbook/customer-schemes/{self.enrollment.id}/generate')
        self.assertEqual(response.json()['data']['generated'], 1)
        entry = PassbookEntry.objects.get()
        response = self.client.delete(f'/api/passbook/{entry.id}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Cannot delete generated entries')

    def test_summary_endpoint(self):
        response = self.client.get(f'/api/passbook/customer/{self.customer.id}/summary')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['customerName'], self.customer.name)
