"""
Fixture builders shared by the app test modules.
"""
from datetime import date
from decimal import Decimal

from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from customers.models import Customer
from schemes.models import ChitScheme


def make_user(email='admin@test.in', role=User.ROLE_ADMIN, name='Test User', password='pass1234'):
    return User.objects.create_user(email=email, password=password, name=name, role=role)


def make_scheme(name='Test Scheme', number_of_members=10, **overrides):
    fields = {
        'name': name,
        'chit_value': Decimal('100000.00'),
        'duration': 10,
        'duration_type': ChitScheme.DURATION_MONTHS,
        'payment_type': ChitScheme.PAYMENT_DAILY,
        'daily_payment': Decimal('500.00'),
        'number_of_members': number_of_members,
        'start_date': date(2024, 1, 1),
    }
    fields.update(overrides)
    return ChitScheme.objects.create(**fields)


def make_customer(name='Ravi Kumar', mobile='9876543210', **overrides):
    fields = {'name': name, 'mobile': mobile, 'address': '12 Temple Street, Madurai'}
    fields.update(overrides)
    return Customer.objects.create(**fields)


def auth_client(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {AccessToken.for_user(user)}')
    return client
