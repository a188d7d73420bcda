"""Domain errors raised by the service layer.

Business-rule violations subclass ``ValueError`` so the HTTP layer can keep
mapping them to 4xx responses the same way as plain validation errors.
"""
from __future__ import annotations


class DataSourceError(Exception):
    """A read against the transactional store failed."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class DataSourceTimeoutError(DataSourceError):
    """A read exceeded the configured fetch deadline."""


class InvalidRangeError(ValueError):
    pass


class MissingPriceError(ValueError):
    def __init__(self, price_type: str, product_names: list[str]) -> None:
        self.price_type = price_type
        self.product_names = product_names
        super().__init__(
            f"{price_type.capitalize()} price not set for {', '.join(product_names)}"
        )


class DuplicateSupplyError(ValueError):
    pass


class PinNotConfiguredError(ValueError):
    pass


class InvalidPinError(ValueError):
    pass
