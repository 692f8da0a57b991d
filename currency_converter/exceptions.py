"""Exception hierarchy for the currency converter."""


class ConverterError(Exception):
    """Base class for all converter errors."""


class ConversionValidationError(ConverterError, ValueError):
    """Raised when an amount or currency code fails input validation."""


class UnsupportedCurrencyError(ConverterError):
    """Raised when a requested currency is absent from a freshly fetched table."""

    def __init__(self, currency: str, base_currency: str | None = None) -> None:
        self.currency = currency
        self.base_currency = base_currency
        super().__init__(f"Exchange rate not available for {currency}")


class FetchError(ConverterError):
    """Base class for rate provider failures."""


class FetchTimeoutError(FetchError, TimeoutError):
    """Raised when the rate provider does not answer within the timeout."""


class TransportError(FetchError):
    """Raised for network-level failures and non-2xx responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProtocolError(FetchError):
    """Raised when the provider response is malformed."""


class PersistenceReadError(ConverterError):
    """Raised when a persisted history blob cannot be decoded."""


class ConversionFailedError(ConverterError):
    """Generic user-facing failure of a conversion that needed the network."""


class RefreshFailedError(ConverterError):
    """Generic user-facing failure of a rate refresh."""


class RatesUnavailableError(ConverterError):
    """Generic user-facing failure to load a rate table for display."""
