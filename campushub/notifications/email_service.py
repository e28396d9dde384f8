"""
Email delivery via AWS SES.

In development mode nothing is sent; the message is written to the log
instead. Sending never raises: failures are logged and reported as False.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# SES accepts at most 50 destinations per message (To + Cc + Bcc)
SES_MAX_DESTINATIONS = 50


class EmailService:
    """
    Thin SES client.

    Args:
        from_email (str): Verified sender address.
        from_name (str): Sender display name.
        region (str): AWS region of the SES endpoint.
        development_mode (bool): Log instead of sending.
        timeout_seconds (int): Connect and read timeout for SES calls.
        ses_client: Pre-built client (tests); created from the arguments otherwise.
    """

    def __init__(
        self,
        from_email: str,
        from_name: str = "CampusHub",
        region: str = "us-east-1",
        development_mode: bool = True,
        timeout_seconds: int = 5,
        ses_client: Any = None,
    ) -> None:
        self.from_email = from_email
        self.from_name = from_name
        self.development_mode = development_mode
        self.ses_client = ses_client

        if self.ses_client is None and not self.development_mode:
            self.ses_client = boto3.client(
                "ses",
                region_name=region,
                config=BotoConfig(
                    connect_timeout=timeout_seconds,
                    read_timeout=timeout_seconds,
                    retries={"max_attempts": 2},
                ),
            )
            logger.info("AWS SES client initialized")
        elif self.development_mode:
            logger.info("Email service in development mode (emails will be logged)")

    @property
    def source(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

    def send_email(
        self,
        to: Sequence[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        bcc: Sequence[str] = (),
    ) -> bool:
        """
        Send one message.

        Args:
            to: Visible recipients.
            subject: Subject line.
            text_body: Plain text body.
            html_body: Optional HTML alternative.
            bcc: Hidden recipients.

        Returns:
            True if SES accepted the message (or it was logged in development
            mode), False otherwise.
        """
        if self.development_mode:
            logger.info(
                f"EMAIL (development mode, not sent) From: {self.source} "
                f"To: {', '.join(to)} Bcc: {len(bcc)} recipient(s) Subject: {subject}"
            )
            logger.debug(text_body)
            return True

        body: Dict[str, Any] = {"Text": {"Charset": "UTF-8", "Data": text_body}}
        if html_body:
            body["Html"] = {"Charset": "UTF-8", "Data": html_body}

        destination: Dict[str, List[str]] = {"ToAddresses": list(to)}
        if bcc:
            destination["BccAddresses"] = list(bcc)

        try:
            response = self.ses_client.send_email(
                Source=self.source,
                Destination=destination,
                Message={
                    "Subject": {"Charset": "UTF-8", "Data": subject},
                    "Body": body,
                },
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.error(f"AWS SES error sending '{subject}': {error.get('Code')} - {error.get('Message')}")
            return False
        except BotoCoreError as e:
            logger.error(f"SES transport error sending '{subject}': {e}")
            return False

        logger.info(f"Email '{subject}' sent (MessageId: {response.get('MessageId', 'unknown')})")
        return True

    def send_bulk(self, recipients: Sequence[str], subject: str, text_body: str, html_body: Optional[str] = None) -> bool:
        """
        Send the same message to many addresses without exposing them to each other.

        Recipients go in BCC with the sender as the visible recipient, split
        into as few SES calls as the destination limit allows.

        Returns:
            True only if every batch was accepted.
        """
        unique = list(dict.fromkeys(recipients))
        if not unique:
            logger.info(f"No recipients for '{subject}'. Skipping email.")
            return True

        batch_size = SES_MAX_DESTINATIONS - 1  # the visible To address counts too
        all_sent = True
        for start in range(0, len(unique), batch_size):
            batch = unique[start:start + batch_size]
            sent = self.send_email([self.from_email], subject, text_body, html_body, bcc=batch)
            all_sent = all_sent and sent
        return all_sent
