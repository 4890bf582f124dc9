# hotel_ledger/errors.py


class LedgerError(Exception):
    status_code = 500
    title = "Unexpected error"

    def __init__(self, detail: str, title: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if title:
            self.title = title


class StoreUnavailableError(LedgerError):
    """A query against one of the record collections failed."""

    status_code = 503
    title = "Error fetching data"

    def __init__(self, collection: str, cause: Exception | None = None):
        detail = f"Failed to read '{collection}'"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail, title=f"Error fetching {collection.replace('_', ' ')}")
        self.collection = collection


class ValidationFailure(LedgerError):
    status_code = 400
    title = "Invalid input"


class RecordNotFoundError(LedgerError):
    status_code = 404
    title = "Not found"

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"No record '{record_id}' in {collection}")
        self.collection = collection
        self.record_id = record_id


class StaleRequestError(LedgerError):
    status_code = 409
    title = "Superseded request"
