"""
Confirmation flows around invoice and estimate status changes.

A status change either applies at once or parks the request as pending
until the user confirms (or cancels) it.
"""
import logging

from .api import ApiError

logger = logging.getLogger(__name__)

FAILED_STATUS_MESSAGE = 'Failed to update status. Please try again.'


class InvoiceStatusActions:
    """Drafting applies immediately; every other status needs confirmation"""

    def __init__(self, store):
        self.store = store
        self.show_status_modal = False
        self.pending_status = None
        self.pending_invoice = None
        self.error = None

    def handle_status_change(self, invoice, new_status):
        if new_status == 'draft':
            return self._update_status(invoice, new_status)
        self.pending_invoice = invoice
        self.pending_status = new_status
        self.show_status_modal = True
        return None

    def confirm(self):
        result = None
        if self.pending_invoice and self.pending_status:
            result = self._update_status(self.pending_invoice, self.pending_status)
        self.cancel()
        return result

    def cancel(self):
        self.show_status_modal = False
        self.pending_status = None
        self.pending_invoice = None

    def _update_status(self, invoice, new_status):
        # The server numbers invoices leaving draft and stamps paid_at
        self.error = None
        try:
            return self.store.update(invoice['id'], {'status': new_status})
        except ApiError as e:
            logger.error(f"Failed to update invoice {invoice['id']} status: {e.message}")
            self.error = FAILED_STATUS_MESSAGE
            return None


class EstimateStatusActions:
    """
    Sending asks for confirmation, accepting or rejecting asks for reasons,
    and returning to draft applies immediately.
    """

    def __init__(self, store):
        self.store = store
        self.show_status_modal = False
        self.show_sent_confirmation = False
        self.pending_status = None
        self.error = None

    def handle_status_change(self, estimate, new_status):
        if new_status == 'sent' and estimate.get('status') != 'sent':
            self.show_sent_confirmation = True
            return None
        if new_status in ('accepted', 'rejected') and estimate.get('status') != new_status:
            self.pending_status = new_status
            self.show_status_modal = True
            return None
        return self._perform(estimate, new_status, [])

    def confirm_sent(self, estimate):
        self.show_sent_confirmation = False
        return self._perform(estimate, 'sent', [])

    def cancel_sent(self):
        self.show_sent_confirmation = False

    def confirm_reasons(self, estimate, reasons):
        result = None
        if self.pending_status:
            result = self._perform(estimate, self.pending_status, reasons)
        self.cancel_reasons()
        return result

    def cancel_reasons(self):
        self.show_status_modal = False
        self.pending_status = None

    def _perform(self, estimate, new_status, reasons):
        self.error = None
        try:
            return self.store.change_status(estimate['id'], new_status, reasons)
        except ApiError as e:
            logger.error(f"Failed to update estimate {estimate['id']} status: {e.message}")
            self.error = FAILED_STATUS_MESSAGE
            return None
