from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from src.core.config import Settings
from src.schemas.analytics import NotificationResult, WelcomeMessageRequest

logger = logging.getLogger(__name__)

WELCOME_QUICK_REPLY_PAYLOAD = "EXPLORE_HOLIDAY_PACKAGES"
WELCOME_COUPON_CODE = "WELCOME5000"


class WhatsAppNotificationService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def send_welcome_message(self, request: WelcomeMessageRequest) -> NotificationResult:
        payload = self.build_welcome_payload(request.name, request.phone)
        try:
            response = httpx.post(
                self.settings.whatsapp_api_url,
                headers={
                    "authkey": self.settings.whatsapp_auth_key,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                json=payload,
                timeout=self.settings.whatsapp_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.warning("Welcome message to %s failed: %s", request.phone, exc)
            return NotificationResult(success=False, error=str(exc))

        if response.is_success:
            return NotificationResult(
                success=True,
                status_code=response.status_code,
                response=self._response_body(response),
            )
        logger.warning(
            "Welcome message to %s rejected with status %s", request.phone, response.status_code
        )
        return NotificationResult(
            success=False,
            status_code=response.status_code,
            response=self._response_body(response),
            error=f"Messaging provider returned status {response.status_code}",
        )

    def build_welcome_payload(self, name: str, phone: str) -> Dict[str, Any]:
        return {
            "integrated_number": self.settings.whatsapp_integrated_number,
            "content_type": "template",
            "payload": {
                "messaging_product": "whatsapp",
                "type": "template",
                "template": {
                    "name": self.settings.whatsapp_template_name,
                    "language": {
                        "code": self.settings.whatsapp_template_language,
                        "policy": "deterministic",
                    },
                    "namespace": self.settings.whatsapp_template_namespace,
                    "to_and_components": [
                        {
                            "to": [phone],
                            "components": {
                                "body_1": {"type": "text", "value": name},
                                "button_1": {
                                    "subtype": "quick_reply",
                                    "type": "payload",
                                    "value": WELCOME_QUICK_REPLY_PAYLOAD,
                                },
                                "button_2": {
                                    "subtype": "COPY_CODE",
                                    "type": "coupon_code",
                                    "value": WELCOME_COUPON_CODE,
                                },
                            },
                        }
                    ],
                },
            },
        }

    @staticmethod
    def _response_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
