"""
Test suite for Invoices module
Tests: status transitions, numbering on send, filters, status counts, shares
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backoffice.core.models import Activity
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.invoices.models import Invoice


class InvoiceModelTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_becoming_paid_stamps_paid_at(self):
        invoice = TestDataFactory.create_invoice(self.user, invoice_number='INV2025-001', status='sent')
        self.assertTrue(invoice.apply_status('paid'))
        self.assertIsNotNone(invoice.paid_at)
        self.assertIsNotNone(invoice.status_changed_at)

    def test_leaving_paid_clears_paid_at(self):
        invoice = TestDataFactory.create_invoice(self.user, invoice_number='INV2025-001', status='paid')
        invoice.apply_status('sent')
        self.assertIsNone(invoice.paid_at)

    def test_same_status_is_no_change(self):
        invoice = TestDataFactory.create_invoice(self.user)
        self.assertFalse(invoice.apply_status('draft'))
        self.assertIsNone(invoice.status_changed_at)

    def test_needs_number(self):
        draft = TestDataFactory.create_invoice(self.user)
        self.assertFalse(draft.needs_number)
        draft.status = 'sent'
        self.assertTrue(draft.needs_number)
        draft.status = 'canceled'
        self.assertFalse(draft.needs_number)

    def test_is_overdue(self):
        past_due = TestDataFactory.create_invoice(
            self.user, invoice_number='INV2025-002', status='sent',
            issue_date=timezone.localdate() - timedelta(days=40),
            due_date=timezone.localdate() - timedelta(days=10),
        )
        self.assertTrue(past_due.is_overdue)


class InvoiceAPITests(TestCase):
    """Test Invoice API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.contact = TestDataFactory.create_contact(self.user, company_name='Acme AB')
        self.year = timezone.localdate().year

    def _payload(self, **overrides):
        data = {
            'contact': self.contact.id,
            'line_items': [
                {'description': 'Widget', 'quantity': '4', 'unit_price': '250.00', 'vat_rate': '25'},
            ],
        }
        data.update(overrides)
        return data

    def test_create_draft_has_no_number(self):
        response = self.client.post('/api/invoices/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['invoice_number'])
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(Decimal(response.data['total']), Decimal('1250.00'))
        self.assertEqual(response.data['contact_name'], 'Acme AB')
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='INVOICE_CREATED').exists())

    def test_create_sent_gets_number(self):
        response = self.client.post('/api/invoices/', self._payload(status='sent'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_number'], f'INV{self.year}-001')

    def test_sending_draft_assigns_next_number(self):
        TestDataFactory.create_invoice(self.user, invoice_number=f'INV{self.year}-007', status='sent')
        draft = TestDataFactory.create_invoice(self.user)
        response = self.client.patch(f'/api/invoices/{draft.id}/', {'status': 'sent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_number'], f'INV{self.year}-008')
        self.assertIsNotNone(response.data['status_changed_at'])
        self.assertTrue(
            Activity.objects.filter(user=self.user, activity_type='INVOICE_STATUS_CHANGED').exists()
        )

    def test_number_kept_when_paid(self):
        invoice = TestDataFactory.create_invoice(self.user, invoice_number=f'INV{self.year}-003', status='sent')
        response = self.client.put(f'/api/invoices/{invoice.id}/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_number'], f'INV{self.year}-003')
        self.assertIsNotNone(response.data['paid_at'])

    def test_due_date_before_issue_date_rejected(self):
        response = self.client.post(
            '/api/invoices/',
            self._payload(issue_date='2025-03-10', due_date='2025-03-01'),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('due_date', response.data)

    def test_filter_by_status(self):
        TestDataFactory.create_invoice(self.user)
        TestDataFactory.create_invoice(self.user, invoice_number=f'INV{self.year}-001', status='paid')
        response = self.client.get('/api/invoices/', {'status': 'paid'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'paid')

    def test_search_by_contact_name(self):
        TestDataFactory.create_invoice(self.user, contact=self.contact)
        TestDataFactory.create_invoice(self.user)
        response = self.client.get('/api/invoices/', {'search': 'acme'})
        self.assertEqual(len(response.data), 1)

    def test_status_counts(self):
        TestDataFactory.create_invoice(self.user)
        TestDataFactory.create_invoice(self.user)
        TestDataFactory.create_invoice(self.user, invoice_number=f'INV{self.year}-001', status='sent')
        response = self.client.get('/api/invoices/status-counts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'draft': 2, 'sent': 1})

    def test_next_number_preview(self):
        response = self.client.get('/api/invoices/number/next/')
        self.assertEqual(response.data['invoice_number'], f'INV{self.year}-001')

    def test_delete_logs_activity(self):
        invoice = TestDataFactory.create_invoice(self.user)
        response = self.client.delete(f'/api/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Invoice.objects.filter(pk=invoice.id).exists())
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='INVOICE_DELETED').exists())

    def test_other_users_invoice_not_found(self):
        invoice = TestDataFactory.create_invoice(TestDataFactory.create_user())
        response = self.client.get(f'/api/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Invoice not found')


class InvoiceShareTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.invoice = TestDataFactory.create_invoice(self.user, invoice_number='INV2025-001', status='sent')

    def test_share_for_date_only(self):
        valid_until = (timezone.localdate() + timedelta(days=1)).isoformat()
        response = self.client.post(
            '/api/invoices/shares/', {'invoice': self.invoice.id, 'valid_until': valid_until}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_share_for_foreign_invoice(self):
        foreign = TestDataFactory.create_invoice(TestDataFactory.create_user())
        valid_until = (timezone.now() + timedelta(days=1)).isoformat()
        response = self.client.post(
            '/api/invoices/shares/', {'invoice': foreign.id, 'valid_until': valid_until}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Invoice not found or access denied')

    def test_public_invoice(self):
        share = TestDataFactory.create_invoice_share(self.invoice)
        response = AuthenticatedAPIClient().get(f'/api/invoices/public/{share.share_token}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_number'], 'INV2025-001')
        self.assertEqual(response.data['accessed_count'], 1)

    def test_unknown_token(self):
        response = AuthenticatedAPIClient().get('/api/invoices/public/doesnotexist/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
