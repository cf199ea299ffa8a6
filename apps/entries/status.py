# apps/entries/status.py
"""
Entry lifecycle status.

The stored values are the ones the business has always used, even though
two of them read backwards:

- DRAFT means every item has a buyer and a rate (auction finished,
  buyer invoice not yet raised)
- AUCTIONED means every item is on a buyer invoice

The human-readable labels say what each value means; API payloads keep
the stored values.
"""
PENDING = 'Pending'
DRAFT = 'Draft'
AUCTIONED = 'Auctioned'
INVOICED = 'Invoiced'
CANCELLED = 'Cancelled'

STATUS_CHOICES = [
    (PENDING, 'Pending'),
    (DRAFT, 'Auctioned, awaiting buyer invoice'),
    (AUCTIONED, 'Buyer invoiced'),
    (INVOICED, 'Supplier invoiced'),
    (CANCELLED, 'Cancelled'),
]


def compute_status(items, has_supplier_invoice_linkage=False):
    """
    Derive an entry's status from its items.

    ``items`` is any sequence of objects exposing ``buyer_id``,
    ``rate_per_quantity``, ``invoice_id`` and ``supplier_invoice_id``
    (EntryItem rows or in-memory auction items). Rules, first match wins:

    1. no items -> PENDING
    2. supplier invoice linkage on the entry or any item -> INVOICED
    3. every item buyer-invoiced -> AUCTIONED
    4. every item has a buyer and a non-zero rate -> DRAFT
    5. otherwise PENDING
    """
    items = list(items)
    if not items:
        return PENDING

    if has_supplier_invoice_linkage or any(item.supplier_invoice_id for item in items):
        return INVOICED

    if all(item.invoice_id for item in items):
        return AUCTIONED

    if all(item.buyer_id and item.rate_per_quantity for item in items):
        return DRAFT

    return PENDING
