"""
Role-based access control:
- unauthenticated requests get 401
- collectors cannot manage schemes or customers
- agents cannot record collections
- any authenticated role can read
"""
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from core.testing import auth_client, make_customer, make_scheme, make_user


class RBACTests(TestCase):
    def setUp(self):
        self.admin = make_user(email='admin@test.in', role=User.ROLE_ADMIN)
        self.agent = make_user(email='agent@test.in', role=User.ROLE_AGENT)
        self.collector = make_user(email='collector@test.in', role=User.ROLE_COLLECTOR)
        self.scheme = make_scheme()
        self.scheme_payload = {
            'name': 'Gold 50K',
            'chitValue': 50000,
            'duration': 10,
            'dailyPayment': 200,
            'numberOfMembers': 10,
            'startDate': '2024-03-01',
        }

    def test_anonymous_gets_401(self):
        response = APIClient().get('/api/chit-schemes')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_collector_cannot_create_scheme(self):
        response = auth_client(self.collector).post('/api/chit-schemes', self.scheme_payload, format='json')
        self.assertEqual(response.status_code, 403)

    def test_agent_can_create_scheme(self):
        response = auth_client(self.agent).post('/api/chit-schemes', self.scheme_payload, format='json')
        self.assertEqual(response.status_code, 201, response.content)

    def test_collector_can_read_schemes(self):
        response = auth_client(self.collector).get('/api/chit-schemes')
        self.assertEqual(response.status_code, 200)

    def test_agent_cannot_record_collection(self):
        customer = make_customer()
        response = auth_client(self.agent).post('/api/collections', {
            'customerId': customer.id,
            'amountPaid': 500,
            'date': '2024-01-02',
            'balanceRemaining': 4500,
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_collector_cannot_delete_customer(self):
        customer = make_customer()
        response = auth_client(self.collector).delete(f'/api/customers/{customer.id}')
        self.assertEqual(response.status_code, 403)
