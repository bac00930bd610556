class PaymentError(Exception):
    """Base class for payment system exceptions."""

    pass


class PaymentValidationError(PaymentError):
    """Raised when payment data validation fails."""

    pass


class CheckoutValidationError(PaymentValidationError):
    """Raised when checkout input is rejected before anything is written."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class PaymentProviderError(PaymentError):
    """Raised when the payment provider returns an error."""

    pass


class PaymentDeclinedError(PaymentProviderError):
    """Raised when the provider declines a charge; the buyer was not charged."""

    def __init__(self, message: str, order_id: str = None, intent_id: str = None):
        super().__init__(message)
        self.order_id = order_id
        self.intent_id = intent_id
