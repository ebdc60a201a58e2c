"""
Test suite for Core module
Tests: totals, numbering, share tokens, activities, settings, dashboard, auth, maintenance
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backoffice.core import maintenance
from backoffice.core.models import Activity, Setting
from backoffice.core.numbering import allocate_number, format_number, next_number, next_contact_number
from backoffice.core.sharing import (
    ShareTokenError, generate_share_token, parse_valid_until, resolve_valid_until, BASE62_ALPHABET,
)
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.core.totals import calculate_line_item, calculate_totals
from backoffice.core.utils import create_activity
from backoffice.invoices.models import Invoice, InvoiceShare


class TotalsTests(TestCase):
    def test_line_item(self):
        item = calculate_line_item({'quantity': '2', 'unit_price': '500', 'discount': '10', 'vat_rate': '25'})
        self.assertEqual(item['line_subtotal'], Decimal('1000.00'))
        self.assertEqual(item['discount_amount'], Decimal('100.00'))
        self.assertEqual(item['line_subtotal_after_discount'], Decimal('900.00'))
        self.assertEqual(item['vat_amount'], Decimal('225.00'))
        self.assertEqual(item['line_total'], Decimal('1125.00'))

    def test_missing_vat_rate_defaults_to_25(self):
        item = calculate_line_item({'quantity': 1, 'unit_price': 100})
        self.assertEqual(item['vat_amount'], Decimal('25.00'))

    def test_document_discount(self):
        totals = calculate_totals([{'quantity': 1, 'unit_price': '100', 'vat_rate': '25'}], document_discount='10')
        self.assertEqual(totals['document_discount_amount'], Decimal('10.00'))
        self.assertEqual(totals['subtotal_after_document_discount'], Decimal('90.00'))
        self.assertEqual(totals['total_vat'], Decimal('22.50'))
        self.assertEqual(totals['total'], Decimal('112.50'))

    def test_mixed_vat_rates(self):
        totals = calculate_totals([
            {'quantity': 1, 'unit_price': '100', 'vat_rate': '25'},
            {'quantity': 1, 'unit_price': '100', 'vat_rate': '12'},
            {'quantity': 1, 'unit_price': '100', 'vat_rate': '0'},
        ])
        self.assertEqual(totals['total_vat'], Decimal('37.00'))
        self.assertEqual(totals['total'], Decimal('337.00'))

    def test_parts_add_up(self):
        totals = calculate_totals([
            {'quantity': '3', 'unit_price': '33.33', 'discount': '7.5', 'vat_rate': '25'},
            {'quantity': '1.5', 'unit_price': '19.99', 'discount': '0', 'vat_rate': '6'},
        ], document_discount='3')
        self.assertEqual(
            totals['total'],
            totals['subtotal'] - totals['total_discount'] - totals['document_discount_amount'] + totals['total_vat']
        )

    def test_empty(self):
        totals = calculate_totals([])
        self.assertEqual(totals['total'], Decimal('0.00'))
        self.assertEqual(totals['total_vat'], Decimal('0.00'))


class NumberingTests(TestCase):
    def test_format(self):
        self.assertEqual(format_number('INV', 2025, 7), 'INV2025-007')
        self.assertEqual(format_number('', 2025, 1234), '2025-1234')

    def test_next_number_ignores_other_years_and_junk(self):
        existing = ['INV2025-007', 'INV2025-010', 'INV2024-099', 'INV2025-abc', None]
        self.assertEqual(next_number(existing, 'INV', year=2025), 'INV2025-011')
        self.assertEqual(next_number([], '', year=2025), '2025-001')

    def test_next_contact_number(self):
        self.assertEqual(next_contact_number([]), '01')
        self.assertEqual(next_contact_number(['01', '7', 'abc', None]), '08')
        self.assertEqual(next_contact_number(['99']), '100')

    def test_allocate_retries_after_collision(self):
        user = TestDataFactory.create_user()
        year = timezone.localdate().year
        attempts = []

        def save(number):
            attempts.append(number)
            if len(attempts) == 1:
                raise IntegrityError('duplicate')
            return number

        number = allocate_number(Invoice.objects.filter(user=user), 'invoice_number', 'INV', save)
        self.assertEqual(attempts, [f'INV{year}-001', f'INV{year}-002'])
        self.assertEqual(number, f'INV{year}-002')


class ShareTokenTests(TestCase):
    def test_token_shape(self):
        tokens = {generate_share_token() for _ in range(20)}
        self.assertEqual(len(tokens), 20)
        for token in tokens:
            self.assertGreaterEqual(len(token), 32)
            self.assertTrue(all(c in BASE62_ALPHABET for c in token))

    def test_date_only_means_end_of_day(self):
        parsed = parse_valid_until('2030-06-01')
        self.assertTrue(timezone.is_aware(parsed))
        local = timezone.localtime(parsed)
        self.assertEqual((local.hour, local.minute, local.second), (23, 59, 59))

    def test_unparseable(self):
        self.assertIsNone(parse_valid_until('next week'))
        self.assertIsNone(parse_valid_until(''))

    def test_past_rejected(self):
        with self.assertRaises(ShareTokenError):
            resolve_valid_until('2000-01-01T00:00:00Z')


class CreateActivityTests(TestCase):
    def test_creates_entry(self):
        user = TestDataFactory.create_user()
        activity = create_activity(user=user, activity_type='CONTACT_CREATED', description='Created contact X')
        self.assertIsNotNone(activity)
        self.assertEqual(activity.user, user)

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_activity(activity_type='CONTACT_CREATED'))
        self.assertFalse(Activity.objects.exists())


class MaintenanceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_cleanup_old_activities(self):
        old = create_activity(user=self.user, activity_type='CONTACT_CREATED', description='old')
        create_activity(user=self.user, activity_type='CONTACT_CREATED', description='new')
        Activity.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=45))
        self.assertEqual(maintenance.cleanup_old_activities(30), 1)
        self.assertEqual(list(Activity.objects.values_list('description', flat=True)), ['new'])

    def test_clean_expired_shares(self):
        invoice = TestDataFactory.create_invoice(self.user)
        TestDataFactory.create_invoice_share(invoice, valid_until=timezone.now() - timedelta(hours=1))
        active = TestDataFactory.create_invoice_share(invoice)
        self.assertEqual(maintenance.clean_expired_shares(), 1)
        self.assertEqual(list(InvoiceShare.objects.values_list('id', flat=True)), [active.id])

    def test_optimize_db_command(self):
        out = StringIO()
        call_command('optimize_db', '--days', '7', stdout=out)
        self.assertIn('Activities removed: 0', out.getvalue())

    def test_optimize_db_rejects_zero_days(self):
        with self.assertRaises(CommandError):
            call_command('optimize_db', '--days', '0', stdout=StringIO())


class AuthAPITests(TestCase):
    """Test registration, login and current user endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_returns_tokens(self):
        data = {
            'username': 'newowner',
            'email': 'owner@example.com',
            'password': 'Tr1cky-Ledger-42',
            'password_confirm': 'Tr1cky-Ledger-42',
        }
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['username'], 'newowner')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_register_password_mismatch(self):
        data = {
            'username': 'newowner',
            'password': 'Tr1cky-Ledger-42',
            'password_confirm': 'something-else-42',
        }
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_and_me(self):
        user = TestDataFactory.create_user(username='owner', password='testpass123')
        response = self.client.post('/api/auth/login/', {'username': 'owner', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = self.client.get('/api/auth/me/')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['id'], user.id)
        self.assertIn('contacts', me.data['plugins'])

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='owner')
        response = self.client.post('/api/auth/login/', {'username': 'owner', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        TestDataFactory.create_user(username='owner', password='testpass123')
        tokens = self.client.post(
            '/api/auth/login/', {'username': 'owner', 'password': 'testpass123'}, format='json'
        ).data
        response = self.client.post('/api/auth/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)


class ActivityAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        for i in range(12):
            create_activity(user=self.user, activity_type='CONTACT_CREATED', description=f'Contact {i}')

    def test_default_limit(self):
        response = self.client.get('/api/activities/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 10)
        self.assertEqual(response.data[0]['description'], 'Contact 11')

    def test_custom_and_invalid_limit(self):
        self.assertEqual(len(self.client.get('/api/activities/', {'limit': 2}).data), 2)
        self.assertEqual(len(self.client.get('/api/activities/', {'limit': 'many'}).data), 10)

    def test_only_own_activities(self):
        other = TestDataFactory.create_user()
        create_activity(user=other, activity_type='CONTACT_CREATED', description='Not mine')
        response = self.client.get('/api/activities/', {'limit': 100})
        self.assertEqual(len(response.data), 12)

    def test_clear(self):
        other = TestDataFactory.create_user()
        create_activity(user=other, activity_type='CONTACT_CREATED', description='Not mine')
        response = self.client.delete('/api/activities/')
        self.assertEqual(response.data, {'deleted': 12})
        self.assertEqual(Activity.objects.count(), 1)


class SettingAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_missing_setting(self):
        response = self.client.get('/api/settings/company_name/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Setting not found')

    def test_value_required(self):
        response = self.client.post('/api/settings/company_name/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Value is required')

    def test_upsert(self):
        created = self.client.post('/api/settings/company_name/', {'value': 'Acme AB'}, format='json')
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        updated = self.client.post('/api/settings/company_name/', {'value': 'Acme Group AB'}, format='json')
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='company_name').value, 'Acme Group AB')

        listed = self.client.get('/api/settings/')
        self.assertEqual([s['key'] for s in listed.data], ['company_name'])


class DashboardAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_stats(self):
        today = timezone.localdate()
        TestDataFactory.create_invoice(self.user)
        TestDataFactory.create_invoice(
            self.user, invoice_number='INV2025-001', status='sent',
            issue_date=today - timedelta(days=40), due_date=today - timedelta(days=10),
        )
        TestDataFactory.create_invoice(self.user, invoice_number='INV2025-002', status='paid')
        TestDataFactory.create_estimate(self.user, estimate_number='2025-001', status='accepted')
        TestDataFactory.create_estimate(self.user, estimate_number='2025-002', status='accepted')
        TestDataFactory.create_estimate(self.user, estimate_number='2025-003', status='rejected')
        TestDataFactory.create_contact(self.user)
        TestDataFactory.create_invoice(TestDataFactory.create_user(), invoice_number='INV2025-001', status='paid')

        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        invoices = response.data['invoices']
        self.assertEqual(invoices['total'], 3)
        self.assertEqual(invoices['by_status']['draft'], 1)
        self.assertEqual(invoices['overdue'], 1)
        self.assertEqual(Decimal(invoices['unpaid_amount']), Decimal('125.00'))
        self.assertEqual(Decimal(invoices['paid_amount']), Decimal('125.00'))
        self.assertEqual(response.data['estimates']['acceptance_rate'], 66.7)
        self.assertEqual(response.data['contacts'], 1)
        self.assertEqual(response.data['products'], 0)

    def test_no_decided_estimates(self):
        response = self.client.get('/api/dashboard/stats/')
        self.assertIsNone(response.data['estimates']['acceptance_rate'])
        self.assertEqual(Decimal(response.data['invoices']['unpaid_amount']), Decimal('0.00'))
