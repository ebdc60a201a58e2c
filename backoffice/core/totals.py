"""
Line item and document total calculations shared by invoices and estimates.

All amounts are Decimals rounded half-up to two decimals. A line item is a
dict with ``quantity``, ``unit_price``, ``discount`` (percent) and
``vat_rate`` (percent, 25 when missing).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
HUNDRED = Decimal('100')
DEFAULT_VAT_RATE = Decimal('25')


def to_decimal(value, default=Decimal('0')) -> Decimal:
    """Coerce numbers and numeric strings to Decimal, falling back to ``default``."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _vat_rate(item) -> Decimal:
    return to_decimal(item.get('vat_rate'), DEFAULT_VAT_RATE)


def calculate_line_item(item: dict) -> dict:
    """Return a copy of ``item`` with its derived amounts filled in."""
    quantity = to_decimal(item.get('quantity'))
    unit_price = to_decimal(item.get('unit_price'))
    discount = to_decimal(item.get('discount'))
    vat_rate = _vat_rate(item)

    line_subtotal = quantity * unit_price
    discount_amount = line_subtotal * discount / HUNDRED
    after_discount = line_subtotal - discount_amount
    vat_amount = after_discount * vat_rate / HUNDRED

    result = dict(item)
    result.update({
        'line_subtotal': money(line_subtotal),
        'discount_amount': money(discount_amount),
        'line_subtotal_after_discount': money(after_discount),
        'vat_amount': money(vat_amount),
        'line_total': money(after_discount + vat_amount),
    })
    return result


def calculate_totals(line_items, document_discount=0) -> dict:
    """
    Compute document totals.

    The document discount (percent) applies to the sum of lines after their
    own discounts. VAT is then allocated to each line in proportion to its
    share of that sum, at the line's own rate.
    """
    subtotal = Decimal('0')
    total_discount = Decimal('0')
    subtotal_after_discount = Decimal('0')
    nets = []

    for item in line_items or []:
        quantity = to_decimal(item.get('quantity'))
        unit_price = to_decimal(item.get('unit_price'))
        line_subtotal = quantity * unit_price
        discount_amount = line_subtotal * to_decimal(item.get('discount')) / HUNDRED
        after_discount = line_subtotal - discount_amount

        subtotal += line_subtotal
        total_discount += discount_amount
        subtotal_after_discount += after_discount
        nets.append((after_discount, _vat_rate(item)))

    document_discount_amount = subtotal_after_discount * to_decimal(document_discount) / HUNDRED
    subtotal_after_document_discount = subtotal_after_discount - document_discount_amount

    total_vat = Decimal('0')
    if subtotal_after_discount != 0:
        for net, vat_rate in nets:
            share = net / subtotal_after_discount
            total_vat += subtotal_after_document_discount * share * vat_rate / HUNDRED

    # Derived figures are built from the rounded parts so they add up to the cent
    rounded_subtotal = money(subtotal)
    rounded_discount = money(total_discount)
    rounded_document_discount = money(document_discount_amount)
    rounded_vat = money(total_vat)
    after_discount = rounded_subtotal - rounded_discount
    after_document_discount = after_discount - rounded_document_discount

    return {
        'subtotal': rounded_subtotal,
        'total_discount': rounded_discount,
        'subtotal_after_discount': after_discount,
        'document_discount_amount': rounded_document_discount,
        'subtotal_after_document_discount': after_document_discount,
        'total_vat': rounded_vat,
        'total': after_document_discount + rounded_vat,
    }
