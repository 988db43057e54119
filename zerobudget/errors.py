# errors.py
"""Domain errors raised by the service layer.

Controllers and assistant tools share the same services. ``main.py`` turns
``status_code`` and ``message`` into the JSON error response; the assistant
loop reports them back to the model.
"""


class BudgetError(Exception):
    """Base class for every error the service layer raises on purpose."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BudgetError):
    """A required field is missing or malformed. Raised before any write."""

    status_code = 400


class NotFoundError(BudgetError):
    """An id does not resolve to a stored entity."""

    status_code = 404

    def __init__(self, entity: str, entity_id=None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id
