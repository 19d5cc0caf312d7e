"""
Domain errors raised by the repositories, the budget engine and the importer.
HTTP mapping lives in security.setup_error_handlers.
"""


class TrackerError(Exception):
    """Base exception for job tracker errors"""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(TrackerError):
    """Referenced job, material, invoice or notification does not exist"""
    status_code = 404

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class EmptyImport(TrackerError):
    """An uploaded file normalised to zero materials"""
    status_code = 400

    def __init__(self, message: str = "No materials found in file"):
        super().__init__(message)


class StoreFailure(TrackerError):
    """A persistence operation failed; transactional batches leave no partial rows"""
    status_code = 500

    def __init__(self, message: str, original: Exception = None):
        self.original = original
        super().__init__(message)


class MalformedNumeric(TrackerError):
    """A numeric field could not be parsed. Never fatal to an import."""
    status_code = 400

    def __init__(self, field: str, raw_value):
        self.field = field
        self.raw_value = raw_value
        super().__init__(f"Could not parse {field!s} value {raw_value!r} as a number")
