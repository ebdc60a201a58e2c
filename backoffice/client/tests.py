"""
Test suite for the API clients and panel stores
Tests: error mapping, date parsing, contact validation, save flows, status confirmations
"""
from datetime import date, datetime
from decimal import Decimal
from unittest import mock

import requests
from django.test import SimpleTestCase

from backoffice.client.api import ApiClient, ApiError, ContactsApi, to_jsonable
from backoffice.client.status_actions import (
    EstimateStatusActions, InvoiceStatusActions, FAILED_STATUS_MESSAGE,
)
from backoffice.client.stores import ContactStore, InvoiceStore, EstimateStore, PanelRegistry, ProductStore


def fake_response(status_code=200, body=None, reason='OK'):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.content = b'{}' if body is not None else b''
    response.json.return_value = body
    return response


class FakeApi:
    """In-memory stand-in for a plugin client"""

    def __init__(self, items=None, fail_with=None):
        self.items = list(items or [])
        self.fail_with = fail_with
        self.calls = []
        self.next_id = 100

    def _check(self):
        if self.fail_with:
            raise self.fail_with

    def list(self):
        self._check()
        return list(self.items)

    def create(self, data):
        self.calls.append(('create', data))
        self._check()
        self.next_id += 1
        return dict(data, id=self.next_id)

    def update(self, pk, data):
        self.calls.append(('update', pk, data))
        self._check()
        return dict(data, id=pk)

    def delete(self, pk):
        self.calls.append(('delete', pk))
        self._check()
        return {}

    def change_status(self, pk, status, reasons=None):
        self.calls.append(('change_status', pk, status, reasons))
        self._check()
        return {'id': pk, 'status': status}


class ApiClientTests(SimpleTestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.session.headers = {}
        self.client = ApiClient('https://office.example.com/', token='abc', session=self.session)

    def test_bearer_header_and_url(self):
        self.assertEqual(self.session.headers['Authorization'], 'Bearer abc')
        self.assertEqual(self.client.url('/contacts/'), 'https://office.example.com/api/contacts/')

    def test_dates_parsed(self):
        self.session.request.return_value = fake_response(body=[
            {'id': 1, 'issue_date': '2025-03-01', 'created_at': '2025-03-01T10:00:00Z', 'notes': '2025-01-01'},
        ])
        records = self.client.get('/invoices/')
        self.assertEqual(records[0]['issue_date'], date(2025, 3, 1))
        self.assertIsInstance(records[0]['created_at'], datetime)
        self.assertEqual(records[0]['notes'], '2025-01-01')

    def test_conflict_message(self):
        self.session.request.return_value = fake_response(
            status_code=409, reason='Conflict',
            body={'errors': [{'field': 'sku', 'message': 'SKU "A" already exists'}]},
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.post('/products/', json={'sku': 'A'})
        self.assertEqual(ctx.exception.message, 'SKU "A" already exists')
        self.assertEqual(ctx.exception.status, 409)
        self.assertEqual(ctx.exception.field_errors[0]['field'], 'sku')

    def test_error_message_falls_back(self):
        self.session.request.return_value = fake_response(status_code=404, reason='Not Found', body={'error': 'Contact not found'})
        with self.assertRaises(ApiError) as ctx:
            self.client.get('/contacts/9/')
        self.assertEqual(ctx.exception.message, 'Contact not found')

        self.session.request.return_value = fake_response(status_code=500, reason='Server Error')
        with self.assertRaises(ApiError) as ctx:
            self.client.get('/contacts/')
        self.assertEqual(ctx.exception.message, 'Server Error')

    def test_network_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(ApiError) as ctx:
            self.client.get('/contacts/')
        self.assertEqual(ctx.exception.status, 0)
        self.assertEqual(ctx.exception.message, 'Network unreachable')

    def test_empty_body(self):
        self.session.request.return_value = fake_response(status_code=204, reason='No Content')
        self.assertEqual(self.client.delete('/contacts/1/'), {})

    def test_json_body_serialized(self):
        self.session.request.return_value = fake_response(body={'id': 1})
        self.client.post('/invoices/', json={'due_date': date(2025, 4, 1), 'invoice_discount': Decimal('5.5')})
        sent = self.session.request.call_args[1]['json']
        self.assertEqual(sent, {'due_date': '2025-04-01', 'invoice_discount': '5.5'})

    def test_login_sets_token(self):
        self.session.request.return_value = fake_response(body={'access': 'new-access', 'refresh': 'r'})
        self.client.login('owner', 'secret')
        self.assertEqual(self.session.headers['Authorization'], 'Bearer new-access')

    def test_plugin_paths(self):
        self.session.request.return_value = fake_response(body={'contact_number': '05'})
        self.assertEqual(ContactsApi(self.client).next_number(), '05')
        args = self.session.request.call_args[0]
        self.assertEqual(args, ('GET', 'https://office.example.com/api/contacts/number/next/'))

    def test_to_jsonable_nested(self):
        self.assertEqual(
            to_jsonable({'line_items': [{'unit_price': Decimal('9.90')}]}),
            {'line_items': [{'unit_price': '9.90'}]}
        )


class PanelRegistryTests(SimpleTestCase):
    def test_opening_one_panel_closes_the_others(self):
        registry = PanelRegistry()
        contacts = ContactStore(FakeApi(), registry)
        products = ProductStore(FakeApi(), registry)

        contacts.open_panel()
        products.open_for_view({'id': 1})
        self.assertFalse(contacts.is_panel_open)
        self.assertTrue(products.is_panel_open)
        self.assertEqual(products.panel_mode, 'view')

    def test_disposed_store_is_left_alone(self):
        registry = PanelRegistry()
        contacts = ContactStore(FakeApi(), registry)
        products = ProductStore(FakeApi(), registry)
        contacts.open_panel()
        contacts.dispose()
        products.open_panel()
        self.assertTrue(contacts.is_panel_open)


class ContactStoreTests(SimpleTestCase):
    def setUp(self):
        self.api = FakeApi(items=[
            {'id': 1, 'contact_number': '01', 'company_name': 'Acme AB', 'contact_type': 'company',
             'organization_number': '556000-1111', 'email': 'info@acme.se'},
            {'id': 2, 'contact_number': '02', 'company_name': 'Anna Svensson', 'contact_type': 'private',
             'personal_number': '19800101-1234'},
        ])
        self.store = ContactStore(self.api)
        self.store.load()

    def test_new_contact_gets_next_number(self):
        self.store.open_panel()
        self.assertTrue(self.store.save({'company_name': 'Beta AB'}))
        self.assertEqual(self.api.calls[0][1]['contact_number'], '03')
        self.assertFalse(self.store.is_panel_open)
        self.assertEqual(len(self.store.items), 3)

    def test_duplicate_number(self):
        errors = self.store.validate({'contact_number': '01', 'company_name': 'Beta AB'})
        self.assertEqual(errors[0]['message'], 'Contact number "01" already exists for "Acme AB"')

    def test_name_required_message_depends_on_type(self):
        company = self.store.validate({'contact_number': '09', 'company_name': ' '})
        private = self.store.validate({'contact_number': '09', 'contact_type': 'private'})
        self.assertEqual(company[0]['message'], 'Company name is required')
        self.assertEqual(private[0]['message'], 'Full name is required')

    def test_duplicate_identity_numbers(self):
        errors = self.store.validate({
            'contact_number': '09', 'company_name': 'Copy AB', 'organization_number': '556000-1111',
        })
        self.assertEqual(errors[0]['field'], 'organization_number')
        errors = self.store.validate({
            'contact_number': '09', 'company_name': 'Copy', 'contact_type': 'private',
            'personal_number': '19800101-1234',
        })
        self.assertEqual(errors[0]['field'], 'personal_number')

    def test_editing_ignores_own_record(self):
        self.store.open_for_edit(self.store.items[0])
        self.assertEqual(self.store.validate(dict(self.store.items[0])), [])

    def test_duplicate_email_is_only_a_warning(self):
        data = {'contact_number': '09', 'company_name': 'Beta AB', 'email': 'info@acme.se'}
        errors = self.store.validate(data)
        self.assertEqual(errors[0]['field'], 'email')
        self.assertIn('(Warning)', errors[0]['message'])
        self.store.open_panel()
        self.assertTrue(self.store.save(data))

    def test_server_conflict_becomes_field_error(self):
        self.api.fail_with = ApiError(
            'Contact number "07" already exists', status=409,
            errors=[{'field': 'contact_number', 'message': 'Contact number "07" already exists'}],
        )
        self.store.open_panel()
        self.assertFalse(self.store.save({'contact_number': '07', 'company_name': 'Beta AB'}))
        self.assertEqual(self.store.validation_errors[0]['field'], 'contact_number')
        self.assertTrue(self.store.is_panel_open)

    def test_other_failure_becomes_general_error(self):
        self.api.fail_with = ApiError('Network unreachable', status=0)
        self.store.open_panel()
        self.assertFalse(self.store.save({'company_name': 'Beta AB'}))
        self.assertEqual(
            self.store.validation_errors,
            [{'field': 'general', 'message': 'Failed to save contact. Please try again.'}]
        )

    def test_update_switches_to_view(self):
        self.store.open_for_edit(self.store.items[0])
        self.assertTrue(self.store.save(dict(self.store.items[0], company_name='Acme Group AB')))
        self.assertEqual(self.store.panel_mode, 'view')
        self.assertEqual(self.store.items[0]['company_name'], 'Acme Group AB')

    def test_delete_closes_panel_of_deleted_record(self):
        self.store.open_for_view(self.store.items[1])
        self.assertTrue(self.store.delete(2))
        self.assertFalse(self.store.is_panel_open)
        self.assertEqual([c['id'] for c in self.store.items], [1])


class DocumentStoreTests(SimpleTestCase):
    def test_due_date_check(self):
        store = InvoiceStore(FakeApi())
        errors = store.validate({'issue_date': date(2025, 3, 10), 'due_date': date(2025, 3, 1)})
        self.assertEqual(errors[0]['message'], 'Due date cannot be before issue date')
        store.open_panel()
        self.assertFalse(store.save({'issue_date': '2025-03-10', 'due_date': '2025-03-01'}))

    def test_preview_totals_uses_document_discount(self):
        store = EstimateStore(FakeApi())
        totals = store.preview_totals({
            'line_items': [{'quantity': 1, 'unit_price': '100', 'vat_rate': '25'}],
            'estimate_discount': '10',
        })
        self.assertEqual(totals['total'], Decimal('112.50'))


class InvoiceStatusActionsTests(SimpleTestCase):
    def setUp(self):
        self.api = FakeApi()
        self.store = InvoiceStore(self.api)
        self.actions = InvoiceStatusActions(self.store)
        self.invoice = {'id': 5, 'status': 'sent'}

    def test_draft_applies_immediately(self):
        self.actions.handle_status_change(self.invoice, 'draft')
        self.assertEqual(self.api.calls, [('update', 5, {'status': 'draft'})])
        self.assertFalse(self.actions.show_status_modal)

    def test_other_statuses_wait_for_confirmation(self):
        self.actions.handle_status_change(self.invoice, 'paid')
        self.assertTrue(self.actions.show_status_modal)
        self.assertEqual(self.api.calls, [])

        self.actions.confirm()
        self.assertEqual(self.api.calls, [('update', 5, {'status': 'paid'})])
        self.assertFalse(self.actions.show_status_modal)
        self.assertIsNone(self.actions.pending_status)

    def test_cancel(self):
        self.actions.handle_status_change(self.invoice, 'canceled')
        self.actions.cancel()
        self.assertEqual(self.api.calls, [])
        self.assertIsNone(self.actions.pending_invoice)

    def test_failure_sets_error(self):
        self.api.fail_with = ApiError('boom', status=500)
        self.actions.handle_status_change(self.invoice, 'draft')
        self.assertEqual(self.actions.error, FAILED_STATUS_MESSAGE)


class EstimateStatusActionsTests(SimpleTestCase):
    def setUp(self):
        self.api = FakeApi()
        self.actions = EstimateStatusActions(EstimateStore(self.api))
        self.estimate = {'id': 3, 'status': 'draft'}

    def test_sent_needs_confirmation(self):
        self.actions.handle_status_change(self.estimate, 'sent')
        self.assertTrue(self.actions.show_sent_confirmation)
        self.actions.confirm_sent(self.estimate)
        self.assertEqual(self.api.calls, [('change_status', 3, 'sent', [])])
        self.assertFalse(self.actions.show_sent_confirmation)

    def test_accept_collects_reasons(self):
        self.actions.handle_status_change(self.estimate, 'accepted')
        self.assertTrue(self.actions.show_status_modal)
        self.actions.confirm_reasons(self.estimate, ['quality'])
        self.assertEqual(self.api.calls, [('change_status', 3, 'accepted', ['quality'])])
        self.assertFalse(self.actions.show_status_modal)

    def test_back_to_draft_applies_immediately(self):
        self.actions.handle_status_change({'id': 3, 'status': 'sent'}, 'draft')
        self.assertEqual(self.api.calls, [('change_status', 3, 'draft', [])])

    def test_cancel_reasons(self):
        self.actions.handle_status_change(self.estimate, 'rejected')
        self.actions.cancel_reasons()
        self.assertIsNone(self.actions.pending_status)
        self.assertEqual(self.api.calls, [])
