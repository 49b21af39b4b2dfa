class SeatingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail


class ValidationError(SeatingError):
    """Bad dimensions, empty selections, malformed register numbers."""

    status_code = 400


class ConflictError(SeatingError):
    """Duplicate register number or department name."""

    status_code = 409


class NotFoundError(SeatingError):
    status_code = 404


class PartialBulkFailure(SeatingError):
    """
    Raised after a bulk insert committed every non-conflicting record.
    ``inserted`` holds what was written, ``skipped`` the rejected register numbers.
    """

    status_code = 207

    def __init__(self, inserted, skipped):
        super().__init__(f"{len(skipped)} students already exist and were skipped")
        self.inserted = inserted
        self.skipped = skipped
