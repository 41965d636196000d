"""Error taxonomy shared by the checkout components.

`UpstreamError` and its subclasses wrap failures of the payment gateway, the
ledger store and the mail transport and map to HTTP 500. Client mistakes
(missing fields, bad signature) never raise: they are returned as 400 results.
`ConfigurationError` is never recovered.
"""


class UpstreamError(Exception):
    """A downstream capability call failed."""


class OrderGatewayError(UpstreamError):
    pass


class LedgerError(UpstreamError):
    pass


class NotificationError(UpstreamError):
    pass


class ConfigurationError(Exception):
    """Missing or malformed credentials/options."""
