"""
Panel state for the back-office clients.

Each plugin keeps a store with its loaded records and the state of its side
panel (open, which record, create/edit/view mode, validation errors). Only
one panel is open at a time: stores share a ``PanelRegistry`` and opening a
panel closes every other registered panel.
"""
import logging

from backoffice.core.numbering import next_contact_number
from backoffice.core.totals import calculate_totals
from .api import ApiError

logger = logging.getLogger(__name__)

WARNING_MARKER = '(Warning)'


def is_blocking(error):
    """Errors marked as warnings are shown but do not stop a save"""
    return WARNING_MARKER not in error.get('message', '')


def _stripped(data, key):
    return str(data.get(key) or '').strip()


class PanelRegistry:
    def __init__(self):
        self._close_functions = {}

    def register(self, plugin_name, close_function):
        self._close_functions[plugin_name] = close_function

    def unregister(self, plugin_name):
        self._close_functions.pop(plugin_name, None)

    def close_all(self, except_plugin=None):
        for plugin_name, close_function in list(self._close_functions.items()):
            if plugin_name != except_plugin:
                close_function()


class PanelStore:
    """Records of one plugin plus the state of its panel"""
    plugin_name = ''
    label = 'item'

    def __init__(self, api, registry=None):
        self.api = api
        self.registry = registry
        self.items = []
        self.is_panel_open = False
        self.current_item = None
        self.panel_mode = 'create'
        self.validation_errors = []
        if registry is not None:
            registry.register(self.plugin_name, self.close_panel)

    def dispose(self):
        if self.registry is not None:
            self.registry.unregister(self.plugin_name)

    def load(self):
        try:
            self.items = self.api.list()
        except ApiError as e:
            logger.error(f"Failed to load {self.plugin_name}: {e.message}")
        return self.items

    # Panel

    def _open(self, item, mode):
        if self.registry is not None:
            self.registry.close_all(except_plugin=self.plugin_name)
        self.current_item = item
        self.panel_mode = mode
        self.is_panel_open = True
        self.validation_errors = []

    def open_panel(self, item=None):
        self._open(item, 'edit' if item else 'create')

    def open_for_edit(self, item):
        self._open(item, 'edit')

    def open_for_view(self, item):
        self._open(item, 'view')

    def close_panel(self):
        self.is_panel_open = False
        self.current_item = None
        self.panel_mode = 'create'
        self.validation_errors = []

    def clear_validation_errors(self):
        self.validation_errors = []

    # Persistence

    def validate(self, data):
        """Return a list of ``{'field', 'message'}`` errors for ``data``"""
        return []

    def prepare(self, data):
        """Hook to fill in derived values before validation"""
        return data

    def _replace_item(self, saved):
        self.items = [saved if item.get('id') == saved.get('id') else item for item in self.items]

    def update(self, pk, data):
        """Send an update and replace the record in ``items``; returns the saved record"""
        saved = self.api.update(pk, data)
        self._replace_item(saved)
        if self.current_item and self.current_item.get('id') == pk:
            self.current_item = saved
        return saved

    def save(self, data):
        """
        Validate and persist ``data`` as the current item (update) or a new
        one (create). Returns True on success.
        """
        data = self.prepare(dict(data))
        errors = self.validate(data)
        self.validation_errors = errors
        if any(is_blocking(error) for error in errors):
            return False

        try:
            if self.current_item:
                self.update(self.current_item['id'], data)
                self.panel_mode = 'view'
                self.validation_errors = []
            else:
                saved = self.api.create(data)
                self.items = self.items + [saved]
                self.close_panel()
        except ApiError as e:
            logger.error(f"Failed to save {self.label}: {e.message}")
            if e.field_errors:
                self.validation_errors = [{'field': err['field'], 'message': err['message']} for err in e.field_errors]
            else:
                self.validation_errors = [
                    {'field': 'general', 'message': f'Failed to save {self.label}. Please try again.'}
                ]
            return False
        return True

    def delete(self, pk):
        try:
            self.api.delete(pk)
        except ApiError as e:
            logger.error(f"Failed to delete {self.label} {pk}: {e.message}")
            return False
        self.items = [item for item in self.items if item.get('id') != pk]
        if self.current_item and self.current_item.get('id') == pk:
            self.close_panel()
        return True

    def _others(self):
        current_id = self.current_item.get('id') if self.current_item else None
        return [item for item in self.items if item.get('id') != current_id]


class ContactStore(PanelStore):
    plugin_name = 'contacts'
    label = 'contact'

    def next_contact_number(self):
        return next_contact_number(item.get('contact_number') for item in self.items)

    def prepare(self, data):
        if not self.current_item and not _stripped(data, 'contact_number'):
            data['contact_number'] = self.next_contact_number()
        return data

    def validate(self, data):
        errors = []
        others = self._others()
        contact_type = data.get('contact_type') or 'company'

        number = _stripped(data, 'contact_number')
        if not number:
            errors.append({'field': 'contact_number', 'message': 'Contact number is required'})
        else:
            existing = next((c for c in others if c.get('contact_number') == number), None)
            if existing:
                errors.append({
                    'field': 'contact_number',
                    'message': f'Contact number "{number}" already exists for "{existing.get("company_name")}"',
                })

        if not _stripped(data, 'company_name'):
            errors.append({
                'field': 'company_name',
                'message': 'Company name is required' if contact_type == 'company' else 'Full name is required',
            })

        if contact_type == 'company':
            org_number = _stripped(data, 'organization_number')
            existing = org_number and next(
                (c for c in others
                 if c.get('contact_type') == 'company' and c.get('organization_number') == org_number),
                None
            )
            if existing:
                errors.append({
                    'field': 'organization_number',
                    'message': f'Organization number already exists for "{existing.get("company_name")}"',
                })

        if contact_type == 'private':
            personal_number = _stripped(data, 'personal_number')
            existing = personal_number and next(
                (c for c in others
                 if c.get('contact_type') == 'private' and c.get('personal_number') == personal_number),
                None
            )
            if existing:
                errors.append({
                    'field': 'personal_number',
                    'message': f'Personal number already exists for "{existing.get("company_name")}"',
                })

        email = _stripped(data, 'email')
        existing = email and next((c for c in others if c.get('email') == email), None)
        if existing:
            errors.append({
                'field': 'email',
                'message': f'Email already exists for "{existing.get("company_name")}" {WARNING_MARKER}',
            })

        return errors


class ProductStore(PanelStore):
    plugin_name = 'products'
    label = 'product'

    def validate(self, data):
        if not _stripped(data, 'title'):
            return [{'field': 'title', 'message': 'Title is required'}]
        return []


class DocumentStore(PanelStore):
    """Invoices and estimates: line items with totals previewed locally"""
    discount_field = ''

    def preview_totals(self, data):
        return calculate_totals(data.get('line_items') or [], data.get(self.discount_field) or 0)


class InvoiceStore(DocumentStore):
    plugin_name = 'invoices'
    label = 'invoice'
    discount_field = 'invoice_discount'

    def validate(self, data):
        issue_date = data.get('issue_date')
        due_date = data.get('due_date')
        if issue_date and due_date and str(due_date) < str(issue_date):
            return [{'field': 'due_date', 'message': 'Due date cannot be before issue date'}]
        return []


class EstimateStore(DocumentStore):
    plugin_name = 'estimates'
    label = 'estimate'
    discount_field = 'estimate_discount'

    def change_status(self, pk, status, reasons=None):
        """Post a status transition and replace the record in ``items``"""
        saved = self.api.change_status(pk, status, reasons)
        self._replace_item(saved)
        if self.current_item and self.current_item.get('id') == pk:
            self.current_item = saved
        return saved
