"""
Test suite for Contacts module
Tests: numbering, uniqueness conflicts, validation, filtering, activity logging
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from backoffice.core.models import Activity
from backoffice.core.numbering import next_contact_number
from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.contacts.models import Contact


class ContactNumberTests(TestCase):
    def test_first_number(self):
        self.assertEqual(next_contact_number([]), '01')

    def test_after_highest_numeric(self):
        self.assertEqual(next_contact_number(['01', '07', '3']), '08')

    def test_non_numeric_ignored(self):
        self.assertEqual(next_contact_number(['abc', '02', None]), '03')

    def test_grows_past_two_digits(self):
        self.assertEqual(next_contact_number(['99']), '100')


class ContactAPITests(TestCase):
    """Test Contact API endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/contacts/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_assigns_next_number(self):
        TestDataFactory.create_contact(self.user, contact_number='04')
        response = self.client.post('/api/contacts/', {'company_name': 'Acme AB'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['contact_number'], '05')
        self.assertEqual(response.data['company_name'], 'Acme AB')

    def test_create_logs_activity(self):
        response = self.client.post('/api/contacts/', {'company_name': 'Acme AB'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        activity = Activity.objects.get(user=self.user)
        self.assertEqual(activity.activity_type, 'CONTACT_CREATED')
        self.assertEqual(activity.contact_id, response.data['id'])

    def test_company_name_required(self):
        response = self.client.post('/api/contacts/', {'company_name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Company name is required', str(response.data['company_name']))

    def test_full_name_required_for_private(self):
        response = self.client.post('/api/contacts/', {'contact_type': 'private'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Full name is required', str(response.data['company_name']))

    def test_duplicate_contact_number_conflict(self):
        TestDataFactory.create_contact(self.user, contact_number='01')
        response = self.client.post(
            '/api/contacts/', {'contact_number': '01', 'company_name': 'Other AB'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors'][0]['field'], 'contact_number')

    def test_duplicate_org_number_conflict(self):
        TestDataFactory.create_contact(self.user, organization_number='556677-8899')
        response = self.client.post(
            '/api/contacts/',
            {'company_name': 'Other AB', 'organization_number': '556677-8899'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors'][0]['field'], 'organization_number')

    def test_duplicate_personal_number_conflict(self):
        TestDataFactory.create_contact(self.user, contact_type='private', personal_number='19800101-1234')
        response = self.client.post(
            '/api/contacts/',
            {'contact_type': 'private', 'company_name': 'Anna Svensson', 'personal_number': '19800101-1234'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors'][0]['field'], 'personal_number')

    def test_same_number_allowed_for_other_user(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_contact(other, contact_number='01')
        response = self.client.post(
            '/api/contacts/', {'contact_number': '01', 'company_name': 'Mine AB'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_update_keeps_own_number(self):
        contact = TestDataFactory.create_contact(self.user, contact_number='01', company_name='Old AB')
        response = self.client.put(
            f'/api/contacts/{contact.id}/',
            {'contact_number': '01', 'company_name': 'New AB'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['company_name'], 'New AB')
        self.assertTrue(
            Activity.objects.filter(user=self.user, activity_type='CONTACT_UPDATED').exists()
        )

    def test_update_blank_number_keeps_existing(self):
        contact = TestDataFactory.create_contact(self.user, contact_number='03')
        response = self.client.patch(f'/api/contacts/{contact.id}/', {'contact_number': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        contact.refresh_from_db()
        self.assertEqual(contact.contact_number, '03')

    def test_other_users_contact_is_not_found(self):
        other = TestDataFactory.create_user()
        contact = TestDataFactory.create_contact(other)
        response = self.client.get(f'/api/contacts/{contact.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Contact not found')

    def test_delete(self):
        contact = TestDataFactory.create_contact(self.user)
        response = self.client.delete(f'/api/contacts/{contact.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], contact.id)
        self.assertFalse(Contact.objects.filter(pk=contact.id).exists())

    def test_search_filter(self):
        TestDataFactory.create_contact(self.user, company_name='Nordic Tools AB')
        TestDataFactory.create_contact(self.user, company_name='Baltic Foods AB')
        response = self.client.get('/api/contacts/?search=nordic')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['company_name'] for c in response.data], ['Nordic Tools AB'])

    def test_list_reflects_new_contact_after_cached_read(self):
        self.client.get('/api/contacts/')
        TestDataFactory.create_contact(self.user, company_name='Fresh AB')
        response = self.client.get('/api/contacts/')
        self.assertEqual(len(response.data), 1)

    def test_next_number_endpoint(self):
        TestDataFactory.create_contact(self.user, contact_number='09')
        response = self.client.get('/api/contacts/number/next/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['contact_number'], '10')
