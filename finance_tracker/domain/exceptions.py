"""Domain-specific exceptions"""

from typing import Dict, List


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RecordValidationError(DomainException):
    """Record is malformed (non-numeric amount, invalid date, out-of-range field)"""

    def __init__(self, kind: str, errors: Dict[str, List[str]]):
        self.kind = kind
        self.errors = errors
        details = "; ".join(f"{name}: {', '.join(msgs)}" for name, msgs in errors.items())
        super().__init__(f"Invalid {kind} record: {details}")


class InvalidRulePatternError(DomainException):
    """Category rule pattern is not a valid regular expression"""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid rule pattern {pattern!r}: {reason}")


class RecordNotFoundError(DomainException):
    """No record with the requested id exists in the collection"""

    pass


class StorageError(DomainException):
    """Stored collection could not be decoded or failed validation"""

    pass
