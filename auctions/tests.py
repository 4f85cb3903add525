"""
Auction rules: winner validation, completed-auction deletion guard, explicit propagation.
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from core.exceptions import BusinessRuleViolation, ImmutableRecord, InvalidMember
from core.testing import auth_client, make_customer, make_scheme, make_user
from core.utils import today
from customers import services as customer_services
from customers.models import CustomerScheme
from auctions import services
from auctions.models import Auction


class AuctionServiceTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.scheme = make_scheme(daily_payment=Decimal('500'))
        self.member = make_customer(name='Member', mobile='9000000001')
        self.outsider = make_customer(name='Outsider', mobile='9000000002')
        self.enrollment = customer_services.enroll(self.member.id, self.scheme.id, Decimal('500'), 100)

    def test_winner_must_be_enrolled(self):
        with self.assertRaises(InvalidMember):
            services.record_auction(
                scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
                winning_member_id=self.outsider.id,
            )
        self.assertEqual(Auction.objects.count(), 0)

    def test_record_does_not_touch_balances(self):
        services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            winning_member_id=self.member.id, amount_received=Decimal('90000'),
            discount_amount=Decimal('10000'), new_daily_payment=Decimal('450'),
            status=Auction.STATUS_COMPLETED,
        )
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.balance, Decimal('50000.00'))
        self.assertEqual(self.enrollment.amount_per_day, Decimal('500.00'))

    def test_completed_auction_cannot_be_deleted(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            status=Auction.STATUS_COMPLETED,
        )
        with self.assertRaises(ImmutableRecord):
            services.delete_auction(auction.id)
        self.assertTrue(Auction.objects.filter(pk=auction.pk).exists())

    def test_unknown_winner_is_invalid_member(self):
        with self.assertRaises(InvalidMember):
            services.record_auction(
                scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
                winning_member_id=999999,
            )
        self.assertEqual(Auction.objects.count(), 0)

    def test_completed_auction_status_is_final(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            status=Auction.STATUS_COMPLETED,
        )
        with self.assertRaises(ImmutableRecord):
            services.update_auction(auction.id, status=Auction.STATUS_SCHEDULED)
        services.update_auction(auction.id, remarks='Paid out in cash')
        auction.refresh_from_db()
        self.assertEqual(auction.status, Auction.STATUS_COMPLETED)
        self.assertEqual(auction.remarks, 'Paid out in cash')
        with self.assertRaises(ImmutableRecord):
            services.delete_auction(auction.id)

    def test_update_revalidates_winner(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
        )
        with self.assertRaises(InvalidMember):
            services.update_auction(auction.id, winning_member_id=self.outsider.id)
        services.update_auction(auction.id, winning_member_id=self.member.id)
        auction.refresh_from_db()
        self.assertEqual(auction.winning_member_id, self.member.id)

    def test_propagate_updates_active_enrollments_once(self):
        defaulted = make_customer(name='Defaulted', mobile='9000000003')
        other = customer_services.enroll(defaulted.id, self.scheme.id, Decimal('500'), 100)
        CustomerScheme.objects.filter(pk=other.pk).update(status=CustomerScheme.STATUS_DEFAULTED)
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            new_daily_payment=Decimal('450'), status=Auction.STATUS_COMPLETED,
        )

        updated = services.propagate_daily_payment(auction.id)

        self.assertEqual(updated, 1)
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.amount_per_day, Decimal('450.00'))
        # (450 - 500) * 100 off the outstanding balance
        self.assertEqual(self.enrollment.balance, Decimal('45000.00'))
        other.refresh_from_db()
        self.assertEqual(other.amount_per_day, Decimal('500.00'))
        self.scheme.refresh_from_db()
        self.assertEqual(self.scheme.daily_payment, Decimal('450.00'))

        with self.assertRaises(BusinessRuleViolation):
            services.propagate_daily_payment(auction.id)

    def test_scheduled_auction_cannot_propagate(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            new_daily_payment=Decimal('450'),
        )
        with self.assertRaises(BusinessRuleViolation):
            services.propagate_daily_payment(auction.id)


class AuctionAPITests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.client = auth_client(self.user)
        self.scheme = make_scheme()
        self.member = make_customer()
        customer_services.enroll(self.member.id, self.scheme.id, Decimal('500'), 100)

    def test_create_with_blank_amounts(self):
        response = self.client.post('/api/auctions', {
            'chitSchemeId': self.scheme.id,
            'auctionDate': '2024-02-01',
            'winningMemberId': self.member.id,
            'amountReceived': '',
            'discountAmount': '',
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()['data']
        self.assertEqual(data['status'], 'SCHEDULED')
        self.assertEqual(data['amountReceived'], 0.0)
        self.assertEqual(data['winningMemberName'], self.member.name)
        self.assertEqual(data['createdById'], self.user.id)

    def test_invalid_winner_message(self):
        outsider = make_customer(name='Outsider', mobile='9000000002')
        response = self.client.post('/api/auctions', {
            'chitSchemeId': self.scheme.id,
            'auctionDate': '2024-02-01',
            'winningMemberId': outsider.id,
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Winning member does not belong to this chit scheme')

    def test_unknown_winner_is_400(self):
        response = self.client.post('/api/auctions', {
            'chitSchemeId': self.scheme.id,
            'auctionDate': '2024-02-01',
            'winningMemberId': 999999,
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Winning member not found')

    def test_completed_auction_cannot_be_reopened_then_deleted(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            status=Auction.STATUS_COMPLETED,
        )
        response = self.client.put(f'/api/auctions/{auction.id}', {'status': 'SCHEDULED'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Cannot change status of completed auction')
        response = self.client.delete(f'/api/auctions/{auction.id}')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(Auction.objects.filter(pk=auction.pk).exists())

    def test_scheme_cannot_change_on_update(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
        )
        other = make_scheme(name='Other')
        response = self.client.put(f'/api/auctions/{auction.id}', {'chitSchemeId': other.id}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_delete_completed_is_400(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            status=Auction.STATUS_COMPLETED,
        )
        response = self.client.delete(f'/api/auctions/{auction.id}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Cannot delete completed auction')

    def test_stats_and_upcoming(self):
        services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            amount_received=Decimal('90000'), discount_amount=Decimal('10000'),
            status=Auction.STATUS_COMPLETED,
        )
        soon = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=today() + timedelta(days=3),
        )
        services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=today() - timedelta(days=3),
        )

        stats = self.client.get('/api/auctions/stats/overview', {'chitSchemeId': self.scheme.id}).json()['data']
        self.assertEqual(stats['totalAuctions'], 3)
        self.assertEqual(stats['completedAuctions'], 1)
        self.assertEqual(stats['scheduledAuctions'], 2)
        self.assertEqual(stats['totalAmountReceived'], 90000.0)
        self.assertEqual(stats['totalDiscount'], 10000.0)

        upcoming = self.client.get('/api/auctions/upcoming/list').json()['data']
        self.assertEqual([a['id'] for a in upcoming], [soon.id])

    def test_propagate_endpoint(self):
        auction = services.record_auction(
            scheme_id=self.scheme.id, created_by=self.user, auction_date=date(2024, 2, 1),
            new_daily_payment=Decimal('480'), status=Auction.STATUS_COMPLETED,
        )
        response = self.client.post(f'/api/auctions/{auction.id}/propagate')
        self.assertEqual(response.status_code, 200, response.content)
        data = response.json()['data']
        self.assertEqual(data['updatedEnrollments'], 1)
        self.assertIsNotNone(data['auction']['propagatedAt'])
