"""
Enrollment balance audit.
Compares each stored balance with amount_per_day * duration - sum(amount_paid) and reports drift.
Usage: python manage.py reconcile_balances [--apply] [--scheme ID]
Without --apply: dry-run only (report, no changes).
"""
from django.core.management.base import BaseCommand

from customers.models import CustomerScheme
from ledger.services import find_balance_drift, reconcile_balance


class Command(BaseCommand):
    help = 'Report (and with --apply, fix) enrollment balances that drifted from their collections'

    def add_arguments(self, parser):
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Reset drifted balances to the derived value (default: dry-run only)',
        )
        parser.add_argument(
            '--scheme',
            type=int,
            help='Only check enrollments of this chit scheme',
        )

    def handle(self, *args, **options):
        apply = options['apply']
        if not apply:
            self.stdout.write(self.style.WARNING('DRY RUN - no changes will be made. Use --apply to fix.'))

        qs = CustomerScheme.objects.all()
        if options.get('scheme'):
            qs = qs.filter(scheme_id=options['scheme'])

        drifted = list(find_balance_drift(qs))
        for enrollment, stored, derived in drifted:
            self.stdout.write(
                f'  Enrollment {enrollment.pk} ({enrollment.customer.name} / {enrollment.scheme.name}): '
                f'stored {stored}, derived {derived}'
            )
            if apply:
                reconcile_balance(enrollment.pk)

        if not drifted:
            self.stdout.write(self.style.SUCCESS('All balances match their collections.'))
        elif apply:
            self.stdout.write(self.style.SUCCESS(f'Reconciled {len(drifted)} enrollment(s).'))
        else:
            self.stdout.write(self.style.WARNING(f'{len(drifted)} enrollment(s) drifted.'))
