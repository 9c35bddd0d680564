from .record import (
    ENVELOPE_FIELDS,
    Envelope,
    EqualityFunction,
    Record,
    WaitForOptions,
    strip_envelope,
)

__all__ = [
    "ENVELOPE_FIELDS",
    "Envelope",
    "EqualityFunction",
    "Record",
    "WaitForOptions",
    "strip_envelope",
]
