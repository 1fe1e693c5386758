# dealgame/domain/errors.py
from __future__ import annotations


class CaseDataError(ValueError):
    """A case (static or generated) is missing data the engine needs."""


class NoCasesRemaining(LookupError):
    """Every case in the catalog has been excluded."""
