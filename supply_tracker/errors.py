class SupplyTrackerError(Exception):
    """Base class for errors surfaced to the caller for correction."""


class InvalidInputError(SupplyTrackerError, ValueError):
    """A count, cash amount or quantity is missing, non-numeric or out of range."""

    def __init__(self, field: str, value, reason: str = "must be a non-negative number"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class EmptySelectionError(SupplyTrackerError):
    """An action that works on selected items was requested with none selected."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"No items selected for {action}")
