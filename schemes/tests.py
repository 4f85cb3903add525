"""
Chit scheme API: creation rules, derived end date, delete guard, list counts.
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase

from core.testing import auth_client, make_customer, make_scheme, make_user
from customers import services as customer_services
from schemes.models import ChitScheme


class ChitSchemeModelTests(TestCase):
    def test_end_date_months(self):
        scheme = make_scheme(start_date=date(2024, 1, 31), duration=1)
        # Jan 31 + 1 month clamps to the end of February
        self.assertEqual(scheme.end_date, date(2024, 2, 29))

    def test_end_date_days(self):
        scheme = make_scheme(start_date=date(2024, 1, 1), duration=30, duration_type=ChitScheme.DURATION_DAYS)
        self.assertEqual(scheme.end_date, date(2024, 1, 31))

    def test_end_date_follows_duration_change(self):
        scheme = make_scheme(start_date=date(2024, 1, 1), duration=10)
        scheme.duration = 12
        scheme.save(update_fields=['duration'])
        scheme.refresh_from_db()
        self.assertEqual(scheme.end_date, date(2025, 1, 1))


class ChitSchemeAPITests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.client = auth_client(self.user)

    def test_create_scheme(self):
        response = self.client.post('/api/chit-schemes', {
            'name': 'Silver 1L',
            'chitValue': 100000,
            'duration': 20,
            'dailyPayment': 175,
            'numberOfMembers': 20,
            'startDate': '2024-01-15',
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()['data']
        self.assertEqual(data['membersEnrolled'], 0)
        self.assertEqual(data['endDate'], '2025-09-15')
        self.assertEqual(data['chitValue'], 100000.0)
        self.assertEqual(data['createdById'], self.user.id)

    def test_daily_scheme_requires_daily_payment(self):
        response = self.client.post('/api/chit-schemes', {
            'name': 'No Payment',
            'chitValue': 100000,
            'duration': 20,
            'numberOfMembers': 20,
            'startDate': '2024-01-15',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'][0]['field'], 'dailyPayment')

    def test_chit_value_minimum(self):
        response = self.client.post('/api/chit-schemes', {
            'name': 'Tiny',
            'chitValue': 500,
            'duration': 5,
            'dailyPayment': 10,
            'numberOfMembers': 5,
            'startDate': '2024-01-15',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_members_cannot_drop_below_enrolled(self):
        scheme = make_scheme(number_of_members=3)
        for index in range(2):
            customer = make_customer(name=f'Member {index}', mobile=f'98765432{index}0')
            customer_services.enroll(customer.id, scheme.id, Decimal('500'), 100)
        response = self.client.put(f'/api/chit-schemes/{scheme.id}', {'numberOfMembers': 2}, format='json')
        self.assertEqual(response.status_code, 200)
        response = self.client.put(f'/api/chit-schemes/{scheme.id}', {'numberOfMembers': 1}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_delete_with_enrollment_is_blocked(self):
        scheme = make_scheme()
        customer = make_customer()
        customer_services.enroll(customer.id, scheme.id, Decimal('500'), 100)
        response = self.client.delete(f'/api/chit-schemes/{scheme.id}')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(ChitScheme.objects.filter(pk=scheme.id).exists())

    def test_delete_empty_scheme(self):
        scheme = make_scheme()
        response = self.client.delete(f'/api/chit-schemes/{scheme.id}')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(ChitScheme.objects.filter(pk=scheme.id).exists())

    def test_missing_scheme_is_404(self):
        response = self.client.get('/api/chit-schemes/999')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'Chit scheme not found')

    def test_list_includes_counts_and_filters(self):
        active = make_scheme(name='Active One')
        make_scheme(name='Paused One', status=ChitScheme.STATUS_PAUSED)
        customer_services.enroll(make_customer().id, active.id, Decimal('500'), 100)

        response = self.client.get('/api/chit-schemes', {'status': 'ACTIVE'})
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['pagination']['total'], 1)
        self.assertEqual(data['items'][0]['_count'], {'customers': 1, 'auctions': 0})

    def test_invalid_sort_key_rejected(self):
        response = self.client.get('/api/chit-schemes', {'sortBy': 'password'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'][0]['field'], 'sortBy')

    def test_stats(self):
        scheme = make_scheme()
        customer_services.enroll(make_customer().id, scheme.id, Decimal('500'), 100)
        response = self.client.get(f'/api/chit-schemes/{scheme.id}/stats')
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['totalMembers'], 1)
        self.assertEqual(data['totalBalance'], 50000.0)
        self.assertEqual(data['totalCollected'], 0.0)
