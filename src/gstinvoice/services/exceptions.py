from __future__ import annotations


class AmountInWordsError(ValueError):
    """Amount cannot be spelled in the Indian scale (negative, or 10^14 and above)."""

    def __init__(self, message: str, amount: int | None = None) -> None:
        super().__init__(message)
        self.amount = amount


class DocumentNotFoundError(LookupError):
    """No registry entry matches the requested document number."""

    def __init__(self, number: str) -> None:
        super().__init__(f"Document not found: {number}")
        self.number = number
