"""
Management command to seed demo data.
Usage: python manage.py seed_demo
Creates an admin, an agent and a collector, two schemes, a handful of enrolled customers
and a week of collections. Safe to re-run: existing users and schemes are reused.
"""
import os
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from core.utils import today
from customers import services as customer_services
from customers.models import Customer
from ledger import services as ledger_services
from schemes.models import ChitScheme

User = get_user_model()

USERS = [
    ('admin@chitfund.local', 'Admin User', User.ROLE_ADMIN),
    ('agent@chitfund.local', 'Field Agent', User.ROLE_AGENT),
    ('collector@chitfund.local', 'Daily Collector', User.ROLE_COLLECTOR),
]

CUSTOMERS = [
    ('Ravi Kumar', '9876543210', '12 Temple Street, Madurai'),
    ('Lakshmi Devi', '9876543211', '45 Market Road, Madurai'),
    ('Suresh Babu', '9876543212', '7 Lake View Colony, Madurai'),
    ('Anitha Raj', '9876543213', '88 Station Road, Madurai'),
]


class Command(BaseCommand):
    help = 'Seed demo data: 3 users, 2 chit schemes, 4 customers, a week of collections'

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('Starting seed data...'))
        password = os.getenv('SEED_PASSWORD', 'demo1234')

        with transaction.atomic():
            users = {}
            for email, name, role in USERS:
                user, created = User.objects.get_or_create(
                    email=email, defaults={'name': name, 'role': role, 'is_active': True},
                )
                if role == User.ROLE_ADMIN:
                    user.is_staff = True
                user.set_password(password)
                user.save()
                users[role] = user
                state = 'Created' if created else 'Exists, password updated'
                self.stdout.write(self.style.SUCCESS(f'{state}: {email} ({role})'))

            start = today() - timedelta(days=7)
            daily, _ = ChitScheme.objects.get_or_create(
                name='Daily 1 Lakh',
                defaults={
                    'chit_value': Decimal('100000'),
                    'duration': 10,
                    'duration_type': ChitScheme.DURATION_MONTHS,
                    'payment_type': ChitScheme.PAYMENT_DAILY,
                    'daily_payment': Decimal('350'),
                    'number_of_members': 20,
                    'start_date': start,
                    'created_by': users[User.ROLE_ADMIN],
                },
            )
            monthly, _ = ChitScheme.objects.get_or_create(
                name='Monthly 5 Lakh',
                defaults={
                    'chit_value': Decimal('500000'),
                    'duration': 20,
                    'duration_type': ChitScheme.DURATION_MONTHS,
                    'payment_type': ChitScheme.PAYMENT_MONTHLY,
                    'monthly_payment': Decimal('25000'),
                    'number_of_members': 20,
                    'start_date': start,
                    'created_by': users[User.ROLE_ADMIN],
                },
            )
            self.stdout.write(self.style.SUCCESS(f'Schemes: {daily.name}, {monthly.name}'))

            for name, mobile, address in CUSTOMERS:
                if Customer.objects.filter(mobile=mobile).exists():
                    self.stdout.write(self.style.WARNING(f'Customer exists: {name}'))
                    continue
                customer = customer_services.create_customer(
                    enrollment_data={
                        'scheme_id': daily.pk,
                        'amount_per_day': daily.daily_payment,
                        'duration': 300,
                        'duration_type': ChitScheme.DURATION_DAYS,
                        'start_date': start,
                    },
                    name=name,
                    mobile=mobile,
                    address=address,
                )
                enrollment = customer.enrollments.get()
                balance = enrollment.balance
                for offset in range(7):
                    balance -= daily.daily_payment
                    ledger_services.record_collection(
                        customer_id=customer.pk,
                        collector=users[User.ROLE_COLLECTOR],
                        amount_paid=daily.daily_payment,
                        date=start + timedelta(days=offset),
                        balance_remaining=balance,
                        customer_scheme_id=enrollment.pk,
                    )
                self.stdout.write(self.style.SUCCESS(f'Customer: {name} (7 collections)'))

        self.stdout.write(self.style.SUCCESS('Seed data completed.'))
        self.stdout.write(f'Login with any seeded email and password "{password}"')
