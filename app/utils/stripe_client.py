from dataclasses import dataclass, field

import stripe

from app.core.config import settings
from app.core.exceptions import PaymentGatewayError
from app.core.logging_config import get_logger

logger = get_logger().bind(log_type="payment")


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    status: str
    amount: int                      # minor units requested
    amount_received: int = 0         # minor units actually captured
    currency: str = "usd"
    client_secret: str | None = None
    metadata: dict = field(default_factory=dict)


def _to_intent(raw) -> PaymentIntent:
    metadata = getattr(raw, "metadata", None) or {}
    return PaymentIntent(
        id=raw.id,
        status=raw.status,
        amount=int(getattr(raw, "amount", None) or 0),
        amount_received=int(getattr(raw, "amount_received", None) or 0),
        currency=getattr(raw, "currency", None) or settings.PAYMENT_CURRENCY,
        client_secret=getattr(raw, "client_secret", None),
        metadata={str(k): str(v) for k, v in metadata.items()},
    )


class StripeGateway:
    """Narrow create/retrieve interface over Stripe PaymentIntents.

    Every call is bounded by ``timeout`` seconds; timeouts and API errors
    surface as :class:`PaymentGatewayError`, never as a silent success.
    """

    def __init__(self, api_key: str, timeout: float, currency: str = "usd"):
        self.api_key = api_key
        self.currency = currency
        self.http_client = stripe.RequestsClient(timeout=timeout)

    def _configure(self):
        stripe.default_http_client = self.http_client
        stripe.max_network_retries = 0

    def create_payment_intent(self, amount_minor: int, currency: str | None = None, metadata: dict | None = None) -> PaymentIntent:
        self._configure()
        try:
            raw = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=amount_minor,
                currency=currency or self.currency,
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe create intent failed -> {e}")
            raise PaymentGatewayError("Payment processor unavailable")

        return _to_intent(raw)

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        self._configure()
        try:
            raw = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe retrieve intent {intent_id} failed -> {e}")
            raise PaymentGatewayError("Payment processor unavailable")

        return _to_intent(raw)


_gateway = None


def get_stripe_gateway() -> StripeGateway:
    global _gateway

    if _gateway is None:
        _gateway = StripeGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
            currency=settings.PAYMENT_CURRENCY,
        )
    return _gateway
