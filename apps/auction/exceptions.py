from shared.exceptions import ServiceValidationError

FIELD_MESSAGES = {
    'product_id': 'Select a product.',
    'quantity': 'Quantity must be greater than zero.',
    'rate_per_quantity': 'Rate must be greater than zero.',
    'buyer_id': 'Select a buyer.',
}


class ItemValidationError(ServiceValidationError):
    """An auction item is missing required fields; ``fields`` maps each one to a message."""
    default_detail = 'The item is incomplete.'
    default_code = 'item_invalid'

    def __init__(self, item_id, errors):
        self.errors = set(errors)
        super().__init__(
            f"Item {item_id} is incomplete: {', '.join(sorted(self.errors))}",
            item_id=item_id,
            fields={name: FIELD_MESSAGES.get(name, 'Invalid value.') for name in sorted(self.errors)},
        )
