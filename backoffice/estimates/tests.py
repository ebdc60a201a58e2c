"""
Test suite for Estimates module
Tests: numbering, totals, status transitions with reasons, conversion, shares
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backoffice.core.models import Activity
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.estimates.models import Estimate, EstimateShare
from backoffice.invoices.models import Invoice


class EstimateAPITests(TestCase):
    """Test Estimate API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.contact = TestDataFactory.create_contact(self.user, company_name='Acme AB', organization_number='556000-1111')
        self.year = timezone.localdate().year

    def _payload(self, **overrides):
        data = {
            'contact': self.contact.id,
            'line_items': [
                {'description': 'Consulting', 'quantity': '2', 'unit_price': '500.00', 'discount': '10', 'vat_rate': '25'},
            ],
            'estimate_discount': '0',
        }
        data.update(overrides)
        return data

    def test_create_allocates_number_and_totals(self):
        response = self.client.post('/api/estimates/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['estimate_number'], f'{self.year}-001')
        self.assertEqual(Decimal(response.data['subtotal']), Decimal('1000.00'))
        self.assertEqual(Decimal(response.data['total_discount']), Decimal('100.00'))
        self.assertEqual(Decimal(response.data['total_vat']), Decimal('225.00'))
        self.assertEqual(Decimal(response.data['total']), Decimal('1125.00'))
        self.assertEqual(response.data['contact_name'], 'Acme AB')
        self.assertEqual(response.data['organization_number'], '556000-1111')
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='ESTIMATE_CREATED').exists())

    def test_numbers_increase(self):
        TestDataFactory.create_estimate(self.user, estimate_number=f'{self.year}-009')
        response = self.client.post('/api/estimates/', self._payload(), format='json')
        self.assertEqual(response.data['estimate_number'], f'{self.year}-010')

    def test_next_number_preview(self):
        TestDataFactory.create_estimate(self.user, estimate_number=f'{self.year}-004')
        response = self.client.get('/api/estimates/next-number/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['estimate_number'], f'{self.year}-005')

    def test_other_users_contact_rejected(self):
        foreign = TestDataFactory.create_contact(TestDataFactory.create_user())
        response = self.client.post('/api/estimates/', self._payload(contact=foreign.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contact', response.data)

    def test_update_recalculates_totals(self):
        estimate = TestDataFactory.create_estimate(self.user)
        response = self.client.patch(
            f'/api/estimates/{estimate.id}/',
            {'line_items': [{'quantity': '3', 'unit_price': '100', 'vat_rate': '0'}]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total']), Decimal('300.00'))
        self.assertEqual(Decimal(response.data['total_vat']), Decimal('0.00'))

    def test_accept_with_reasons(self):
        estimate = TestDataFactory.create_estimate(self.user, status='sent')
        response = self.client.post(
            f'/api/estimates/{estimate.id}/status/',
            {'status': 'accepted', 'reasons': ['quality', 'competitive_price']},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        estimate.refresh_from_db()
        self.assertEqual(estimate.status, 'accepted')
        self.assertEqual(estimate.acceptance_reasons, ['quality', 'competitive_price'])
        self.assertEqual(estimate.rejection_reasons, [])
        self.assertIsNotNone(estimate.status_changed_at)
        self.assertTrue(Activity.objects.filter(user=self.user, activity_type='ESTIMATE_STATUS_CHANGED').exists())

    def test_unknown_reason_rejected(self):
        estimate = TestDataFactory.create_estimate(self.user, status='sent')
        response = self.client.post(
            f'/api/estimates/{estimate.id}/status/',
            {'status': 'rejected', 'reasons': ['quality']},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_convert_to_invoice(self):
        estimate = TestDataFactory.create_estimate(self.user, contact=self.contact, status='accepted')
        response = self.client.post(f'/api/estimates/{estimate.id}/convert-to-invoice/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invoice = Invoice.objects.get(pk=response.data['id'])
        self.assertEqual(invoice.status, 'draft')
        self.assertIsNone(invoice.invoice_number)
        self.assertEqual(invoice.estimate_id, estimate.id)
        self.assertEqual(invoice.total, estimate.total)
        self.assertEqual(response.data['estimate_number'], estimate.estimate_number)

    def test_other_users_estimate_not_found(self):
        estimate = TestDataFactory.create_estimate(TestDataFactory.create_user())
        response = self.client.get(f'/api/estimates/{estimate.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete(self):
        estimate = TestDataFactory.create_estimate(self.user)
        response = self.client.delete(f'/api/estimates/{estimate.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Estimate.objects.filter(pk=estimate.id).exists())


class EstimateShareTests(TestCase):
    """Public share links for estimates"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.estimate = TestDataFactory.create_estimate(self.user)

    def test_create_share(self):
        valid_until = (timezone.now() + timedelta(days=3)).isoformat()
        response = self.client.post(
            '/api/estimates/shares/', {'estimate': self.estimate.id, 'valid_until': valid_until}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertGreaterEqual(len(response.data['share_token']), 32)

    def test_create_share_requires_fields(self):
        response = self.client.post('/api/estimates/shares/', {'estimate': self.estimate.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Estimate ID and valid until date are required')

    def test_create_share_in_past_rejected(self):
        response = self.client.post(
            '/api/estimates/shares/', {'estimate': self.estimate.id, 'valid_until': '2000-01-01'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Valid until date must be in the future')

    def test_public_view_counts_access(self):
        share = TestDataFactory.create_estimate_share(self.estimate)
        anonymous = AuthenticatedAPIClient()
        first = anonymous.get(f'/api/estimates/public/{share.share_token}/')
        second = anonymous.get(f'/api/estimates/public/{share.share_token}/')
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['accessed_count'], 1)
        self.assertEqual(second.data['accessed_count'], 2)
        self.assertEqual(second.data['estimate_number'], self.estimate.estimate_number)

    def test_expired_share_not_found(self):
        share = TestDataFactory.create_estimate_share(self.estimate, valid_until=timezone.now() - timedelta(minutes=1))
        response = AuthenticatedAPIClient().get(f'/api/estimates/public/{share.share_token}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Estimate not found or link expired')

    def test_list_and_revoke(self):
        share = TestDataFactory.create_estimate_share(self.estimate)
        listed = self.client.get(f'/api/estimates/{self.estimate.id}/shares/')
        self.assertEqual([s['id'] for s in listed.data], [share.id])

        response = self.client.delete(f'/api/estimates/shares/{share.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Share revoked successfully')
        self.assertFalse(EstimateShare.objects.filter(pk=share.id).exists())

    def test_cannot_revoke_other_users_share(self):
        other_estimate = TestDataFactory.create_estimate(TestDataFactory.create_user())
        share = TestDataFactory.create_estimate_share(other_estimate)
        response = self.client.delete(f'/api/estimates/shares/{share.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
