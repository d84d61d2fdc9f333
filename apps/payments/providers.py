"""
Payment gateway integration

Charges are created as Stripe PaymentIntents over the plain HTTP API.
In development (no secret key configured, or PAYMENT_PROVIDER=emulated)
an emulated gateway answers locally.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

import requests
from django.conf import settings

from shared.domain.errors import PaymentProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeResult:
    """What the gateway hands back for a created charge."""
    external_reference: str
    client_secret: str = ""


class PaymentProvider(ABC):
    """External payment capability."""

    @abstractmethod
    def create_charge(self, amount_minor_units: int, currency: str, metadata: Mapping[str, str]) -> ChargeResult:
        """Create a charge and return its reference; raise PaymentProviderError on failure."""
        ...


class StripePaymentProvider(PaymentProvider):
    """Stripe PaymentIntents via the REST API."""

    def __init__(self, secret_key: str, base_url: str = "https://api.stripe.com/v1/", timeout: float = 15):
        if not secret_key:
            raise PaymentProviderError("Stripe secret key is not configured.")
        self.secret_key = secret_key
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout

    def create_charge(self, amount_minor_units: int, currency: str, metadata: Mapping[str, str]) -> ChargeResult:
        logger.info(f"Creating Stripe payment intent: {amount_minor_units} {currency}")

        payload = {
            "amount": amount_minor_units,
            "currency": currency.lower(),
            "automatic_payment_methods[enabled]": "true",
        }
        for key, value in metadata.items():
            payload[f"metadata[{key}]"] = str(value)

        try:
            response = requests.post(
                f"{self.base_url}payment_intents",
                data=payload,
                auth=(self.secret_key, ""),
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Stripe API timed out after {self.timeout}s: {e}")
            raise PaymentProviderError("Payment provider timed out.")
        except requests.exceptions.HTTPError as e:
            detail = _error_message(e.response)
            logger.error(f"Stripe API returned an error: {detail}")
            raise PaymentProviderError(f"Payment provider error: {detail}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error while calling Stripe API: {e}")
            raise PaymentProviderError(f"Could not reach payment provider: {e}")
        except ValueError as e:
            logger.error(f"Stripe API returned invalid JSON: {e}")
            raise PaymentProviderError("Payment provider returned an invalid response.")

        if not result.get("id"):
            raise PaymentProviderError("Payment provider returned no payment reference.")

        logger.info(f"Stripe payment intent created: {result['id']}")
        return ChargeResult(
            external_reference=result["id"],
            client_secret=result.get("client_secret") or "",
        )


class EmulatedPaymentProvider(PaymentProvider):
    """Local stand-in for development and tests."""

    def create_charge(self, amount_minor_units: int, currency: str, metadata: Mapping[str, str]) -> ChargeResult:
        reference = f"pi_emulated_{uuid.uuid4().hex[:16]}"
        logger.warning(
            f"Using emulated payment provider: {reference} for {amount_minor_units} {currency}"
        )
        return ChargeResult(
            external_reference=reference,
            client_secret=f"{reference}_secret_{uuid.uuid4().hex[:8]}",
        )


def _error_message(response) -> str:
    if response is None:
        return "unknown error"
    try:
        return response.json().get("error", {}).get("message") or f"HTTP {response.status_code}"
    except ValueError:
        return f"HTTP {response.status_code}"


def get_payment_provider() -> PaymentProvider:
    """Build the provider configured in settings."""
    name = getattr(settings, "PAYMENT_PROVIDER", "emulated")
    secret_key = getattr(settings, "STRIPE_SECRET_KEY", "")

    if name == "stripe" and secret_key:
        return StripePaymentProvider(
            secret_key=secret_key,
            base_url=getattr(settings, "STRIPE_API_BASE_URL", "https://api.stripe.com/v1/"),
            timeout=getattr(settings, "PAYMENT_PROVIDER_TIMEOUT", 15),
        )
    if name == "stripe":
        logger.warning("PAYMENT_PROVIDER is 'stripe' but STRIPE_SECRET_KEY is empty, falling back to emulation")
    return EmulatedPaymentProvider()
