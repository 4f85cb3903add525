"""
Enrollment ledger rules: capacity, duplicates, unenroll, customer deletion and pagination.
"""
import threading
from datetime import date
from decimal import Decimal
from unittest import skipUnless

from django.db import IntegrityError, connection, transaction
from django.test import TestCase, TransactionTestCase

from accounts.models import User
from core.exceptions import AlreadyEnrolled, CapacityExceeded, HasDependents, ImmutableRecord, ResourceNotFound
from core.testing import auth_client, make_customer, make_scheme, make_user
from customers import services
from customers.models import Customer, CustomerScheme
from ledger import services as ledger_services
from schemes.models import ChitScheme


class EnrollmentServiceTests(TestCase):
    def setUp(self):
        self.scheme = make_scheme(number_of_members=2)
        self.a = make_customer(name='Customer A', mobile='9000000001')
        self.b = make_customer(name='Customer B', mobile='9000000002')
        self.c = make_customer(name='Customer C', mobile='9000000003')

    def _members(self):
        self.scheme.refresh_from_db()
        return self.scheme.members_enrolled

    def test_capacity_scenario(self):
        services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        self.assertEqual(self._members(), 1)
        services.enroll(self.b.id, self.scheme.id, Decimal('500'), 100)
        self.assertEqual(self._members(), 2)
        with self.assertRaises(CapacityExceeded):
            services.enroll(self.c.id, self.scheme.id, Decimal('500'), 100)
        self.assertEqual(self._members(), 2)
        self.assertFalse(CustomerScheme.objects.filter(customer=self.c).exists())

    def test_enroll_sets_balance_and_start_date(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('450'), 100)
        self.assertEqual(enrollment.balance, Decimal('45000.00'))
        self.assertEqual(enrollment.start_date, self.scheme.start_date)

    def test_duplicate_enrollment(self):
        services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        with self.assertRaises(AlreadyEnrolled):
            services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        self.assertEqual(CustomerScheme.objects.filter(customer=self.a).count(), 1)
        self.assertEqual(self._members(), 1)

    def test_enroll_then_unenroll_restores_count(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        services.unenroll(enrollment.id)
        self.assertEqual(self._members(), 0)

    def test_completed_enrollment_cannot_be_removed(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        CustomerScheme.objects.filter(pk=enrollment.pk).update(status=CustomerScheme.STATUS_COMPLETED)
        with self.assertRaises(ImmutableRecord):
            services.unenroll(enrollment.id)
        self.assertTrue(CustomerScheme.objects.filter(pk=enrollment.pk).exists())
        self.assertEqual(self._members(), 1)

    def test_enrollment_with_collections_cannot_be_removed(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR)
        ledger_services.record_collection(
            customer_id=self.a.id, collector=collector, amount_paid=Decimal('500'),
            date=date(2024, 1, 2), balance_remaining=Decimal('49500'),
        )
        with self.assertRaises(HasDependents):
            services.unenroll(enrollment.id)

    def test_terms_change_shifts_balance(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        CustomerScheme.objects.filter(pk=enrollment.pk).update(balance=Decimal('40000'))
        updated = services.update_enrollment(enrollment.id, amount_per_day=Decimal('550'))
        # contracted 50000 -> 55000, so 40000 outstanding becomes 45000
        self.assertEqual(updated.balance, Decimal('45000.00'))

    def test_delete_customer_releases_slots(self):
        other = make_scheme(name='Other')
        services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        services.enroll(self.a.id, other.id, Decimal('500'), 100)
        services.delete_customer(self.a.id)
        other.refresh_from_db()
        self.assertEqual(self._members(), 0)
        self.assertEqual(other.members_enrolled, 0)

    def test_delete_customer_with_completed_enrollment_is_kept(self):
        enrollment = services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        services.update_enrollment(enrollment.id, status=CustomerScheme.STATUS_COMPLETED)
        with self.assertRaises(ImmutableRecord):
            services.delete_customer(self.a.id)
        self.assertTrue(Customer.objects.filter(pk=self.a.pk).exists())
        self.assertTrue(CustomerScheme.objects.filter(pk=enrollment.pk).exists())
        self.assertEqual(self._members(), 1)

    def test_unenroll_unknown_enrollment(self):
        with self.assertRaises(ResourceNotFound):
            services.unenroll(999999)
        self.assertEqual(self._members(), 0)

    def test_counter_cannot_pass_capacity_in_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                ChitScheme.objects.filter(pk=self.scheme.pk).update(members_enrolled=3)
        self.assertEqual(self._members(), 0)

    def test_create_customer_with_full_scheme_rolls_back(self):
        services.enroll(self.a.id, self.scheme.id, Decimal('500'), 100)
        services.enroll(self.b.id, self.scheme.id, Decimal('500'), 100)
        with self.assertRaises(CapacityExceeded):
            services.create_customer(
                enrollment_data={'scheme_id': self.scheme.id, 'amount_per_day': Decimal('500'), 'duration': 100},
                name='Late Comer', mobile='9000000009', address='1 Late Street, Madurai',
            )
        self.assertFalse(Customer.objects.filter(name='Late Comer').exists())


class CustomerAPITests(TestCase):
    def setUp(self):
        self.user = make_user(role=User.ROLE_AGENT, email='agent@test.in')
        self.client = auth_client(self.user)
        self.scheme = make_scheme(number_of_members=50)

    def test_create_with_enrollment(self):
        response = self.client.post('/api/customers', {
            'name': 'Meena',
            'mobile': '+91 9876501234',
            'address': '22 North Car Street, Trichy',
            'schemeId': self.scheme.id,
            'amountPerDay': 500,
            'duration': 100,
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()['data']
        self.assertEqual(len(data['schemes']), 1)
        self.assertEqual(data['schemes'][0]['balance'], 50000.0)
        self.scheme.refresh_from_db()
        self.assertEqual(self.scheme.members_enrolled, 1)

    def test_invalid_mobile(self):
        response = self.client.post('/api/customers', {
            'name': 'Meena',
            'mobile': '12345',
            'address': '22 North Car Street, Trichy',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'][0]['field'], 'mobile')

    def test_scheme_id_requires_terms(self):
        response = self.client.post('/api/customers', {
            'name': 'Meena',
            'mobile': '9876501234',
            'address': '22 North Car Street, Trichy',
            'schemeId': self.scheme.id,
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_pagination_second_page(self):
        for index in range(15):
            make_customer(name=f'Customer {index:02d}', mobile=f'90000000{index:02d}')
        response = self.client.get('/api/customers', {'page': 2, 'limit': 10})
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(len(data['items']), 5)
        self.assertEqual(data['pagination'], {'page': 2, 'limit': 10, 'total': 15, 'pages': 2})

    def test_page_past_the_end_is_empty(self):
        make_customer()
        response = self.client.get('/api/customers', {'page': 5})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['items'], [])

    def test_limit_out_of_range(self):
        response = self.client.get('/api/customers', {'limit': 500})
        self.assertEqual(response.status_code, 400)

    def test_search_and_scheme_filter(self):
        enrolled = make_customer(name='Selvi', mobile='9000000011')
        make_customer(name='Kannan', mobile='9000000012')
        services.enroll(enrolled.id, self.scheme.id, Decimal('500'), 100)

        response = self.client.get('/api/customers', {'schemeId': self.scheme.id})
        names = [item['name'] for item in response.json()['data']['items']]
        self.assertEqual(names, ['Selvi'])

        response = self.client.get('/api/customers', {'search': 'kann'})
        names = [item['name'] for item in response.json()['data']['items']]
        self.assertEqual(names, ['Kannan'])

    def test_enroll_and_unenroll_endpoints(self):
        customer = make_customer()
        response = self.client.post(f'/api/customers/{customer.id}/schemes', {
            'schemeId': self.scheme.id, 'amountPerDay': 300, 'duration': 100,
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        enrollment_id = response.json()['data']['customerSchemeId']

        response = self.client.post(f'/api/customers/{customer.id}/schemes', {
            'schemeId': self.scheme.id, 'amountPerDay': 300, 'duration': 100,
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Customer is already enrolled in this chit scheme')

        response = self.client.delete(f'/api/customers/schemes/{enrollment_id}')
        self.assertEqual(response.status_code, 200)
        self.scheme.refresh_from_db()
        self.assertEqual(self.scheme.members_enrolled, 0)

    def test_delete_customer_with_completed_enrollment_is_400(self):
        customer = make_customer()
        enrollment = services.enroll(customer.id, self.scheme.id, Decimal('500'), 100)
        response = self.client.patch(f'/api/customers/schemes/{enrollment.id}', {'status': 'COMPLETED'}, format='json')
        self.assertEqual(response.status_code, 200)

        response = self.client.delete(f'/api/customers/schemes/{enrollment.id}')
        self.assertEqual(response.status_code, 400)
        response = self.client.delete(f'/api/customers/{customer.id}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Cannot delete customer with a completed enrollment')
        self.assertTrue(CustomerScheme.objects.filter(pk=enrollment.pk).exists())

    def test_patch_enrollment_status(self):
        customer = make_customer()
        enrollment = services.enroll(customer.id, self.scheme.id, Decimal('500'), 100)
        response = self.client.patch(f'/api/customers/schemes/{enrollment.id}', {'status': 'DEFAULTED'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], 'DEFAULTED')

    def test_stats_overview(self):
        customer = make_customer()
        services.enroll(customer.id, self.scheme.id, Decimal('500'), 100)
        make_customer(name='Defaulter', mobile='9000000099', status=Customer.STATUS_DEFAULTED)
        response = self.client.get('/api/customers/stats/overview')
        data = response.json()['data']
        self.assertEqual(data['totalCustomers'], 2)
        self.assertEqual(data['defaultedCustomers'], 1)
        self.assertEqual(data['totalEnrollments'], 1)
        self.assertEqual(data['totalBalance'], 50000.0)


@skipUnless(connection.vendor == 'postgresql', 'row locks need PostgreSQL')
class ConcurrentEnrollmentTests(TransactionTestCase):
    """Parallel enrollments against the last free seats; each thread uses its own connection."""

    seats = 3

    def setUp(self):
        self.scheme = make_scheme(number_of_members=self.seats)
        self.customers = [
            make_customer(name=f'Racer {i}', mobile=f'90000001{i:02d}') for i in range(self.seats + 1)
        ]

    def _enroll_all(self):
        barrier = threading.Barrier(len(self.customers))
        outcomes = []
        lock = threading.Lock()

        def worker(customer_id):
            try:
                barrier.wait()
                services.enroll(customer_id, self.scheme.id, Decimal('500'), 100)
                result = 'enrolled'
            except CapacityExceeded:
                result = 'full'
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker, args=(c.id,)) for c in self.customers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return outcomes

    def test_no_overbooking(self):
        outcomes = self._enroll_all()
        self.assertEqual(outcomes.count('enrolled'), self.seats)
        self.assertEqual(outcomes.count('full'), 1)
        self.scheme.refresh_from_db()
        self.assertEqual(self.scheme.members_enrolled, self.seats)
        self.assertEqual(CustomerScheme.objects.filter(scheme=self.scheme).count(), self.seats)
