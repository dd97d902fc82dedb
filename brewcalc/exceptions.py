"""
Brewcalc Exceptions.

A draft never makes the engine raise: missing or garbled recipe values
settle to "undefined" and leave stored numbers alone. BrewCalcError is
for caller mistakes only, such as asking for a field a recipe draft does
not have or shipping a calibration setting that is not a number.
"""

from typing import Any

MESSAGES = {
    "UNKNOWN_FIELD": "not a recipe draft field",
    "NOT_EXPLAINABLE": "entered by the brewer, no formula behind it",
    "INVALID_SETTING": "calibration setting must be a non-negative number",
}


class BrewCalcError(Exception):
    """
    Base exception for all Brewcalc errors.

    Usage:
        raise BrewCalcError('UNKNOWN_FIELD', field='gravity')
        raise BrewCalcError('INVALID_SETTING', name='ABV_FACTOR', value='lots')

    Attributes:
        code: Error code, one of MESSAGES
        details: Additional context as keyword arguments; "field" names a
            draft field, "name" a calibration setting
    """

    def __init__(self, code: str, **details: Any):
        self.code = code
        self.details = details
        super().__init__(str(self))

    @property
    def subject(self) -> str | None:
        """The draft field or setting the error is about."""
        subject = self.details.get("field", self.details.get("name"))
        return None if subject is None else str(subject)

    @property
    def message(self) -> str:
        return MESSAGES.get(self.code, self.code)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, "message": self.message, **self.details}

    def __str__(self) -> str:
        head = f"{self.code} {self.subject!r}" if self.subject else self.code
        extra = {k: v for k, v in self.details.items() if k not in ("field", "name")}
        if extra:
            extra_str = ", ".join(f"{k}={v!r}" for k, v in extra.items())
            return f"BrewCalcError({head}: {self.message}; {extra_str})"
        return f"BrewCalcError({head}: {self.message})"
