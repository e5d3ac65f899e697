from django.core.exceptions import ValidationError


class PersistenceFailure(Exception):
    """A ledger store read or write did not go through."""

    def __init__(self, message, *, collection=None, operation=None, status_code=None):
        super().__init__(message)
        self.collection = collection
        self.operation = operation
        self.status_code = status_code


class MonthAlreadyClosed(Exception):
    """An archive already exists for the month being closed."""

    def __init__(self, month_key):
        super().__init__(f"Month {month_key} is already closed")
        self.month_key = month_key


class MonthNotClosed(Exception):
    """No archive exists for the month being reopened."""

    def __init__(self, month_key):
        super().__init__(f"Month {month_key} is not closed")
        self.month_key = month_key


class DuplicatePartnerLink(ValidationError):
    """Two clients point at the same partner slot."""

    def __init__(self, slot, client_ids):
        self.slot = slot
        self.client_ids = list(client_ids)
        super().__init__(
            f"Partner '{slot}' is linked to more than one client: {', '.join(self.client_ids)}",
            code="duplicate_partner_link",
        )
