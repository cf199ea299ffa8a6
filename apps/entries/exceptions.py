from shared.exceptions import ConflictError


class DuplicateEntryError(ConflictError):
    """The supplier already has an entry for the day; carries the existing entry so callers can open it."""
    default_detail = 'An entry for this supplier already exists for today.'
    default_code = 'duplicate_entry'

    def __init__(self, existing_entry):
        super().__init__(
            f"An entry for this supplier already exists for today (Serial #: {existing_entry.serial_number}).",
            existing_entry_id=existing_entry.pk,
            serial_number=existing_entry.serial_number,
        )


class StaleEntryError(ConflictError):
    """The entry changed since the caller loaded it."""
    default_detail = 'The entry was modified by someone else. Reload and try again.'
    default_code = 'stale_entry'

    def __init__(self, entry, expected_version):
        super().__init__(
            f"Entry {entry.serial_number} is at version {entry.version}, not {expected_version}. Reload and try again.",
            current_version=entry.version,
        )
