"""Notification channel client."""

from dataclasses import dataclass

import structlog

from onboardkit.core.http import RemoteServiceClient


logger = structlog.get_logger()

CREDENTIALS_EMAIL_PATH = "/send-credentials-email"


@dataclass
class NotificationResult:
    """Channel answer. ``response_body`` is kept verbatim."""

    delivered: bool
    status_code: int
    response_body: str


class NotificationClient(RemoteServiceClient):
    """Dispatches owner emails through the notification channel."""

    service_name = "notification"

    async def send_credentials_email(
        self,
        *,
        owner_name: str,
        owner_email: str,
        restaurant_name: str,
        temporary_password: str,
        login_url: str | None = None,
    ) -> NotificationResult:
        """Send the welcome email carrying temporary credentials.

        Raises:
            ServiceUnavailableError: On timeout or transport failure
        """
        body = {
            "ownerName": owner_name,
            "ownerEmail": owner_email,
            "restaurantName": restaurant_name,
            "loginUrl": login_url,
            "includeCredentials": True,
            "temporaryPassword": temporary_password,
        }
        response = await self.request("POST", CREDENTIALS_EMAIL_PATH, json=body)

        result = NotificationResult(
            delivered=response.is_success,
            status_code=response.status_code,
            response_body=response.text,
        )
        if not result.delivered:
            logger.warning(
                "credentials_email_failed",
                status_code=response.status_code,
                restaurant_name=restaurant_name,
            )
        return result
