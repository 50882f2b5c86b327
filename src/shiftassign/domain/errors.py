"""Exceptions raised by the shift assignment engine."""


class ShiftAssignError(Exception): ...


class SetupError(ShiftAssignError):
    """Fatal input problem detected before any assignment is made."""


class NoShiftsDefinedError(SetupError):
    def __init__(self, message: str = "No shift definitions supplied"):
        super().__init__(message)


class NoActiveEmployeesError(SetupError):
    def __init__(self, message: str = "No active employees supplied"):
        super().__init__(message)


class InvalidDateRangeError(SetupError): ...


class SnapshotError(ShiftAssignError, ValueError):
    """A snapshot dict could not be turned into a domain model."""
