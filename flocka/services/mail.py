"""Transactional mail sender (MailChannels HTTP API).

Sending never raises: a failed mail is logged and reported as False so the
operation that triggered it (e.g. registration) still succeeds.
"""

import logging

import requests
from fastapi import Depends

from flocka.config import Config, get_config

logger = logging.getLogger(__name__)

MAILCHANNELS_URL = "https://api.mailchannels.net/tx/v1/send"


class MailService:
    def __init__(self, config: Config = Depends(get_config)):
        self.config = config

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.config.mailchannels_api_key:
            logger.warning("MailService: api key is not configured, mail to %s skipped", to)
            return False
        data = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.config.mail_from, "name": "Flocka"},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        try:
            response = requests.post(
                MAILCHANNELS_URL,
                json=data,
                headers={"X-Api-Key": self.config.mailchannels_api_key},
                timeout=5,
            )
        except requests.RequestException as exc:
            logger.exception("MailService: exception while sending mail to %s: %s", to, exc)
            return False
        if response.status_code >= 300:
            logger.error(
                "MailService: send failed status=%s body=%s",
                response.status_code,
                response.text,
            )
            return False
        logger.info("MailService: mail '%s' sent to %s", subject, to)
        return True

    def send_verification_email(self, to: str, verification_token: str) -> bool:
        verification_url = f"{self.config.api_url}/auth/verify-email?token={verification_token}"
        html = f"""
        <html>
          <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h1>Welcome to Flocka!</h1>
            <p>Please confirm your email address to finish creating your account.</p>
            <p><a href="{verification_url}">Confirm email address</a></p>
            <p>This link expires in {self.config.email_verification_ttl_hours} hours.</p>
          </body>
        </html>
        """
        return self.send(to, "Flocka - confirm your email address", html)
