"""
Authentication endpoints: register, login, profile, change password.
"""
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from core.testing import auth_client, make_user


class RegisterTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_returns_token_and_defaults_to_agent(self):
        response = self.client.post('/api/auth/register', {
            'email': 'new@test.in',
            'password': 'secret1',
            'name': 'New User',
            'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertIn('token', body['data'])
        # Anonymous callers cannot pick their role
        self.assertEqual(body['data']['user']['role'], User.ROLE_AGENT)

    def test_admin_can_register_collector(self):
        admin = make_user()
        response = auth_client(admin).post('/api/auth/register', {
            'email': 'collector@test.in',
            'password': 'secret1',
            'name': 'Collector',
            'role': 'COLLECTOR',
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['data']['user']['role'], User.ROLE_COLLECTOR)

    def test_duplicate_email_is_validation_error(self):
        make_user(email='taken@test.in')
        response = self.client.post('/api/auth/register', {
            'email': 'taken@test.in',
            'password': 'secret1',
            'name': 'Someone',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body['message'], 'Validation failed')
        self.assertEqual(body['errors'][0]['field'], 'email')

    def test_short_password_rejected(self):
        response = self.client.post('/api/auth/register', {
            'email': 'short@test.in',
            'password': '123',
            'name': 'Short',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        fields = [e['field'] for e in response.json()['errors']]
        self.assertIn('password', fields)


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user(email='agent@test.in', role=User.ROLE_AGENT, password='pass1234')

    def test_login_success(self):
        response = self.client.post('/api/auth/login', {
            'email': 'agent@test.in', 'password': 'pass1234',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['user']['email'], 'agent@test.in')
        self.assertTrue(data['token'])

    def test_wrong_password_is_401(self):
        response = self.client.post('/api/auth/login', {
            'email': 'agent@test.in', 'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['message'], 'Invalid credentials')

    def test_deactivated_account_is_401(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/auth/login', {
            'email': 'agent@test.in', 'password': 'pass1234',
        }, format='json')
        self.assertEqual(response.status_code, 401)


class ProfileTests(TestCase):
    def setUp(self):
        self.user = make_user(email='me@test.in', name='Me', password='pass1234')
        self.client = auth_client(self.user)

    def test_get_profile(self):
        response = self.client.get('/api/auth/profile')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['email'], 'me@test.in')

    def test_update_name(self):
        response = self.client.put('/api/auth/profile', {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'Renamed')

    def test_change_password(self):
        response = self.client.post('/api/auth/change-password', {
            'currentPassword': 'pass1234', 'newPassword': 'newpass1',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass1'))

    def test_change_password_wrong_current(self):
        response = self.client.post('/api/auth/change-password', {
            'currentPassword': 'nope', 'newPassword': 'newpass1',
        }, format='json')
        self.assertEqual(response.status_code, 400)
