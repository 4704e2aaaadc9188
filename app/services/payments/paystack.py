import logging
import re
from traceback import format_exc
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.models.paystack import (
    PaymentData,
    PaymentMetadataPayload,
    PaystackInitializationResponse,
    PaystackVerificationResponse,
)
from app.services.exceptions import GatewayError
from config import mask_secret

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def to_minor_units(rand: float) -> int:
    """Convert Rand to cents (Paystack uses the smallest currency unit)."""
    return int(round(rand * 100))


def from_minor_units(cents: int) -> float:
    """Convert cents to Rand."""
    return cents / 100


def extract_price_from_string(price: str) -> int:
    """Extract the price from a label such as ``"R 450"``."""
    match = re.search(r"\d+", price)
    return int(match.group(0)) if match else 0


class PaystackClient:
    """
    Client for the Paystack transaction API.

    Amounts are always passed in cents; conversion happens in the caller.
    """

    BASE_URL = "https://api.paystack.co"
    TIMEOUT = 10  # seconds

    def __init__(
        self,
        secret_key: str,
        public_key: str = "",
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        self.secret_key = secret_key
        self.public_key = public_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or self.TIMEOUT

    @property
    def domain(self) -> str:
        """Paystack domain implied by the secret key."""
        return "live" if self.secret_key.startswith("sk_live") else "test"

    def _validate_config(self) -> None:
        if not self.public_key:
            raise GatewayError("Paystack public key is not configured")
        if not self.secret_key:
            raise GatewayError("Paystack secret key is not configured")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        response_model: Type[R],
        payload: Optional[Dict[str, Any]] = None,
    ) -> R:
        self._validate_config()
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method, url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Paystack request to {path} failed: {str(e)}\n{format_exc()}")
            raise GatewayError(f"Paystack request failed: {str(e)}")

        if not response.ok:
            logger.error(
                f"Paystack API error on {path}: {response.status_code} {response.reason} "
                f"- {response.text} (key {mask_secret(self.secret_key, 15)})"
            )
            raise GatewayError(
                f"Paystack request failed: {response.status_code} {response.reason}",
                upstream_status=response.status_code,
                upstream_body=response.text,
            )

        try:
            return response_model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Unexpected Paystack response from {path}: {str(e)}")
            raise GatewayError(
                "Unexpected Paystack response",
                upstream_status=response.status_code,
                upstream_body=response.text,
            )

    def initialize(
        self,
        customer_email: str,
        amount_minor_units: int,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: PaymentMetadataPayload,
    ) -> PaystackInitializationResponse:
        """
        Initialize a transaction.

        Args:
            customer_email: Payer email
            amount_minor_units: Amount in cents
            currency: ISO currency code
            reference: Pre-generated payment reference
            callback_url: Where Paystack redirects after payment
            metadata: Document and customer details attached to the transaction

        Returns:
            PaystackInitializationResponse with the authorization URL and access code

        Raises:
            GatewayError: If Paystack does not return a 2xx response
        """
        payment_data = PaymentData(
            email=customer_email,
            amount=amount_minor_units,
            currency=currency,
            reference=reference,
            callback_url=callback_url,
            metadata=metadata,
        )

        result = self._request(
            "POST",
            "/transaction/initialize",
            PaystackInitializationResponse,
            payload=payment_data.model_dump(exclude_none=True),
        )
        logger.info(f"Initialized Paystack transaction {result.data.reference}")
        return result

    def verify(self, reference: str) -> PaystackVerificationResponse:
        """
        Verify a transaction by reference.

        Raises:
            GatewayError: If Paystack does not return a 2xx response
        """
        result = self._request(
            "GET", f"/transaction/verify/{reference}", PaystackVerificationResponse
        )
        logger.info(
            f"Verified Paystack transaction {reference}: {result.data.status}"
        )
        return result
