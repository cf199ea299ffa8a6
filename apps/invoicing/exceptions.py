from shared.exceptions import ConflictError


class DuplicateInvoicingError(ConflictError):
    """Entries are already claimed by another supplier invoice."""
    default_detail = 'Duplicate invoicing detected.'
    default_code = 'duplicate_invoicing'

    def __init__(self, invoice_number, conflicting_entry_ids):
        conflicting = sorted(conflicting_entry_ids)
        super().__init__(
            f"Duplicate invoicing detected. Entries already associated with invoice {invoice_number}. "
            f"Conflicting: {', '.join(str(pk) for pk in conflicting)}",
            invoice_number=invoice_number,
            conflicting_entry_ids=conflicting,
        )
