import base64
import logging
from typing import List, Optional

import httpx
from PIL import Image
from pydantic import TypeAdapter, ValidationError

from photobooth.models.delivery import (
    DeliveryRequest, DeliveryResult, ErrorResponse, PartialResponse, ServerResponse
)
from photobooth.services.compositor import encode_png

logger = logging.getLogger(__name__)

# must match the format used in encode_image
IMAGE_MIME = "image/png"

_server_response = TypeAdapter(ServerResponse)


def encode_image(image: Image.Image) -> str:
    return base64.b64encode(encode_png(image, optimize=True)).decode('utf-8')


def interpret_response(body: bytes) -> DeliveryResult:
    try:
        parsed = _server_response.validate_json(body)
    except ValidationError as e:
        logger.error("Failed to decode server response: %s", e)
        return DeliveryResult.decode_failure()

    if isinstance(parsed, ErrorResponse):
        logger.error("Delivery service reported an error: %s", parsed.message)
        return DeliveryResult.failure(parsed.message)
    if isinstance(parsed, PartialResponse):
        logger.warning("Failed to send emails to: %s", parsed.failed_addresses)
        return DeliveryResult.partial_success(parsed.failed_addresses)
    return DeliveryResult.success()


class DeliveryClient:
    """Submits the composed image to the email delivery service. One attempt, no retry."""

    def __init__(
            self,
            endpoint: str,
            timeout: Optional[float] = None,
            transport: Optional[httpx.BaseTransport] = None
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    def deliver(self, image: Image.Image, recipients: List[str]) -> DeliveryResult:
        try:
            encoded = encode_image(image)
        except (OSError, ValueError) as e:
            logger.error("Failed to encode image for transport: %s", e)
            return DeliveryResult.failure("failed to encode image for transport")

        payload = DeliveryRequest(recipients=recipients, image=encoded, image_mime=IMAGE_MIME)
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.endpoint, json=payload.model_dump(by_alias=True))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to send the request to %s: %s", self.endpoint, e)
            return DeliveryResult.transfer_failure()

        logger.info("Delivery service answered %s for %d recipients", response.status_code, len(recipients))
        return interpret_response(response.content)
