"""PaymentGateway over a card provider's HTTP API, using ``httpx``.

Endpoints::

    POST {base}/payment_intents          {amount, currency, metadata: {orderId}}
                                         -> {clientSecret}
    POST {base}/payment_intents/confirm  {client_secret, payment_method}
                                         -> {status, id}

Every request carries the bearer API key and an ``Idempotency-Key``
header. Intent creation is keyed by the order reference and amount, so a
resent request never opens a second intent for the same checkout total.
"""

from __future__ import annotations

import logging
import uuid

import httpx

from storefront.domain.exceptions import PaymentGatewayError
from storefront.domain.model.payment import PaymentConfirmation, PaymentIntent, PaymentStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.port.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

# Card declined: a business outcome, not a transport failure.
_DECLINED = 402


class HttpPaymentGateway(PaymentGateway):

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def create_intent(self, amount: Money, order_ref: str) -> PaymentIntent:
        payload = {
            "amount": amount.cents,
            "currency": amount.currency.lower(),
            "metadata": {"orderId": order_ref},
        }
        idempotency_key = f"intent-{order_ref}-{amount.cents}"
        data = self._post("/payment_intents", payload, idempotency_key, self.timeout)
        secret = data.get("clientSecret")
        if not secret:
            raise PaymentGatewayError("Payment provider returned no client secret")
        logger.debug("Created payment intent for %s (%s)", order_ref, amount)
        return PaymentIntent(client_secret=secret)

    def confirm(
        self, client_secret: str, method: str | None, timeout: float
    ) -> PaymentConfirmation:
        payload = {"client_secret": client_secret, "payment_method": method}
        data = self._post(
            "/payment_intents/confirm",
            payload,
            uuid.uuid4().hex,
            timeout,
            declined_ok=True,
        )

        try:
            status = PaymentStatus(data.get("status"))
        except ValueError as exc:
            raise PaymentGatewayError(
                f"Unknown payment status from provider: {data.get('status')!r}"
            ) from exc
        logger.info("Payment confirmation round finished with status %s", status.value)
        return PaymentConfirmation(status=status, id=data.get("id"))

    # --- Internal helpers -----------------------------------------------------

    def _post(
        self,
        path: str,
        payload: dict,
        idempotency_key: str,
        timeout: float,
        declined_ok: bool = False,
    ) -> dict:
        headers = {"Idempotency-Key": idempotency_key}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        url = f"{self.base_url}{path}"

        try:
            if self._client is not None:
                resp = self._client.post(url, json=payload, headers=headers, timeout=timeout)
            else:
                with httpx.Client(timeout=timeout) as client:
                    resp = client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise TimeoutError(f"Payment provider did not answer within {timeout:g}s") from exc
        except httpx.RequestError as exc:
            raise PaymentGatewayError(f"Payment provider unreachable: {exc}") from exc

        if resp.status_code == _DECLINED and declined_ok:
            data = _json_body(resp)
            data.setdefault("status", PaymentStatus.FAILED.value)
            return data
        if resp.status_code >= 400:
            raise PaymentGatewayError(
                f"Payment provider answered HTTP {resp.status_code} for {path}"
            )
        return _json_body(resp)


def _json_body(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError as exc:
        raise PaymentGatewayError("Payment provider returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise PaymentGatewayError("Payment provider returned an unexpected body")
    return data
