"""
@file client.py
@description Main client classes for the Africa's Talking SDK
@module at_connect.client
@author AT-Connect Team
@created 2025-01-15
"""

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

import httpx

from at_connect.config import AtConfig
from at_connect.http_client import HttpClient, AsyncHttpClient
from at_connect.validators import (
    mask_phone_number,
    validate_phone_number,
    validate_phone_numbers,
    validate_positive_int,
    validate_required_text,
    validate_url,
)
from at_connect.models import (
    AirtimeRecipient,
    AirtimeResult,
    ApplicationData,
    InboundSms,
    MakeCallResult,
    MobileDataRecipient,
    MobileDataResult,
    QueueStatusResult,
    SendSmsResult,
    UploadMediaResult,
)
from at_connect.exceptions import AfricasTalkingError, ValidationError

logger = logging.getLogger(__name__)

SMS_PATH = "/version1/messaging"
AIRTIME_PATH = "/version1/airtime/send"
USER_PATH = "/version1/user"
CALL_PATH = "/call"
QUEUE_STATUS_PATH = "/queueStatus"
MEDIA_UPLOAD_PATH = "/mediaUpload"
MOBILE_DATA_PATH = "/mobile/data/request"

T = TypeVar("T")
PhoneNumbers = Union[str, Iterable[str]]


def _resolve_config(api_key: Optional[str], username: Optional[str], config: Optional[AtConfig]) -> AtConfig:
    if config is None:
        if api_key is None or username is None:
            return AtConfig.from_env(api_key=api_key, username=username)
        return AtConfig(api_key=api_key, username=username)
    overrides = {}
    if api_key is not None:
        overrides["api_key"] = api_key
    if username is not None:
        overrides["username"] = username
    return replace(config, **overrides) if overrides else config


def _sms_form(
    to: PhoneNumbers,
    message: str,
    sender_id: Optional[str],
    enqueue: bool,
    keyword: Optional[str],
    link_id: Optional[str],
    retry_duration_in_hours: Optional[int],
) -> Dict[str, Any]:
    recipients = validate_phone_numbers(to, "to")
    validate_required_text(message, "message")
    form: Dict[str, Any] = {
        "to": ",".join(recipients),
        "message": message,
        "from": sender_id,
        "keyword": keyword,
        "linkId": link_id,
    }
    if enqueue:
        form["enqueue"] = "1"
    if retry_duration_in_hours is not None:
        form["retryDurationInHours"] = str(
            validate_positive_int(retry_duration_in_hours, "retry_duration_in_hours")
        )
    return form


def _airtime_form(recipients: Iterable[AirtimeRecipient]) -> Dict[str, Any]:
    entries = [recipient.to_payload() for recipient in recipients]
    if not entries:
        raise ValidationError("recipients", "At least one airtime recipient is required")
    return {"recipients": json.dumps(entries)}


def _call_form(call_from: str, call_to: PhoneNumbers, client_request_id: Optional[str]) -> Dict[str, Any]:
    return {
        "from": validate_phone_number(call_from, "call_from"),
        "to": ",".join(validate_phone_numbers(call_to, "call_to")),
        "clientRequestId": client_request_id,
    }


def _mobile_data_payload(product_name: str, recipients: Iterable[MobileDataRecipient]) -> Dict[str, Any]:
    validate_required_text(product_name, "product_name")
    entries = [recipient.to_payload() for recipient in recipients]
    if not entries:
        raise ValidationError("recipients", "At least one mobile data recipient is required")
    return {"productName": product_name, "recipients": entries}


def _parse(description: str, parser: Callable[[], T]) -> T:
    """Run a response parser, wrapping malformed payloads in an SDK error."""
    try:
        return parser()
    except AfricasTalkingError:
        raise
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.error(f"Unexpected response payload during {description}: {e}")
        raise AfricasTalkingError(f"{description} failed: {str(e)}")


def _parse_messages(data: Dict[str, Any]) -> List[InboundSms]:
    messages = data.get("SMSMessageData", {}).get("Messages", [])
    return [InboundSms.model_validate(message) for message in messages]


class AtClient:
    """
    Main client for the Africa's Talking REST API.

    Provides SMS, airtime, mobile data, application balance and voice call
    operations.
    USSD and voice callbacks need no client: see :mod:`at_connect.ussd`
    and :mod:`at_connect.voice`.

    Example:
        >>> from at_connect import AtClient
        >>> client = AtClient(api_key='your-api-key', username='sandbox')
        >>> result = client.send_sms(['+254711XXXYYY'], 'Hello')
        >>> print(result.message)

        Using context manager:
        >>> with AtClient(api_key='your-api-key', username='sandbox') as client:
        ...     print(client.get_application_data().balance)

        From environment variables:
        >>> from at_connect import AtClient, AtConfig
        >>> client = AtClient(config=AtConfig.from_env())
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        username: Optional[str] = None,
        config: Optional[AtConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Optional API key (overrides config)
            username: Optional application username (overrides config)
            config: Optional configuration object
            transport: Optional httpx transport, mainly for tests

        Raises:
            ConfigurationError: If credentials are neither passed nor in the environment
        """
        self.config = _resolve_config(api_key, username, config)
        self.http_client = HttpClient(self.config, transport=transport)

        logger.info(f"Africa's Talking client initialized ({self.config.environment.value})")

    def __enter__(self) -> "AtClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self.http_client.close()
        logger.info("Africa's Talking client closed")

    def send_sms(
        self,
        to: PhoneNumbers,
        message: str,
        sender_id: Optional[str] = None,
        enqueue: bool = False,
        keyword: Optional[str] = None,
        link_id: Optional[str] = None,
        retry_duration_in_hours: Optional[int] = None,
    ) -> SendSmsResult:
        """
        Send an SMS to one or more recipients.

        Args:
            to: Recipient phone number or numbers in international format
            message: Message body
            sender_id: Registered short code or alphanumeric sender ID
            enqueue: Queue the messages on the gateway for bulk delivery
            keyword: Premium SMS keyword
            link_id: Premium SMS link ID from an inbound message
            retry_duration_in_hours: Premium SMS retry window

        Returns:
            SendSmsResult with the per-recipient outcome

        Raises:
            ValidationError: If a phone number or the message is invalid
            ApiAuthenticationError: If credentials are rejected
            ApiTimeoutError: If request times out
            ApiError: For other API errors

        Example:
            >>> result = client.send_sms(['+254711XXXYYY', '+254733YYYZZZ'], 'Hello')
            >>> for recipient in result.recipients:
            ...     print(f"{recipient.number}: {recipient.status}")
        """
        form = _sms_form(to, message, sender_id, enqueue, keyword, link_id, retry_duration_in_hours)
        count = form["to"].count(",") + 1
        logger.info(f"Sending SMS to {count} recipient(s)")

        response_data = self.http_client.post(SMS_PATH, form)
        result = _parse("SMS send", lambda: SendSmsResult.from_response(response_data))

        logger.info(f"SMS send completed: {result.message}")
        return result

    def fetch_messages(self, last_received_id: Optional[int] = None) -> List[InboundSms]:
        """
        Fetch inbound messages received after ``last_received_id``.

        Example:
            >>> messages = client.fetch_messages()
            >>> last_id = messages[-1].id if messages else 0
        """
        logger.info(f"Fetching inbound SMS after id {last_received_id}")
        response_data = self.http_client.get(SMS_PATH, {"lastReceivedId": last_received_id or 0})
        return _parse("SMS fetch", lambda: _parse_messages(response_data))

    def send_airtime(self, recipients: Iterable[AirtimeRecipient]) -> AirtimeResult:
        """
        Send airtime to one or more phone numbers.

        Example:
            >>> result = client.send_airtime([
            ...     AirtimeRecipient(phone_number='+254711XXXYYY', amount=100, currency_code='KES'),
            ... ])
            >>> print(result.num_sent, result.total_amount)
        """
        form = _airtime_form(recipients)
        logger.info("Sending airtime")

        response_data = self.http_client.post(AIRTIME_PATH, form)
        result = _parse("Airtime send", lambda: AirtimeResult.model_validate(response_data))

        logger.info(f"Airtime send completed: {result.num_sent} sent")
        return result

    def get_application_data(self) -> ApplicationData:
        """Retrieve application data, including the wallet balance."""
        logger.info("Retrieving application data")
        response_data = self.http_client.get(USER_PATH)
        return _parse("Application data", lambda: ApplicationData.from_response(response_data))

    def make_call(
        self,
        call_from: str,
        call_to: PhoneNumbers,
        client_request_id: Optional[str] = None,
    ) -> MakeCallResult:
        """
        Place an outbound call.

        When a destination answers, the gateway POSTs a :class:`VoiceCallback`
        to the number's callback URL, which should answer with an
        :class:`ActionBuilder` document.

        Args:
            call_from: Your Africa's Talking phone number
            call_to: Destination number or numbers
            client_request_id: Optional tag echoed back in call notifications

        Example:
            >>> result = client.make_call('+254711XXXYYY', ['+254722XXXYYY'])
            >>> for entry in result.entries:
            ...     print(entry.phone_number, entry.status, entry.session_id)
        """
        form = _call_form(call_from, call_to, client_request_id)
        logger.info(f"Placing call from {mask_phone_number(form['from'])}")

        response_data = self.http_client.post(CALL_PATH, form)
        return _parse("Call request", lambda: MakeCallResult.model_validate(response_data))

    def get_queued_calls(self, phone_numbers: PhoneNumbers) -> QueueStatusResult:
        """Query how many calls are waiting in the queues of the given numbers."""
        numbers = validate_phone_numbers(phone_numbers)
        logger.info(f"Querying queue status for {len(numbers)} number(s)")

        response_data = self.http_client.post(QUEUE_STATUS_PATH, {"phoneNumbers": ",".join(numbers)})
        return _parse("Queue status", lambda: QueueStatusResult.model_validate(response_data))

    def upload_media(self, url: str, phone_number: str) -> UploadMediaResult:
        """
        Upload an audio file so Play actions on ``phone_number`` start faster.

        Args:
            url: Publicly reachable URL of the media file
            phone_number: Your Africa's Talking voice number
        """
        form = {
            "url": validate_url(url),
            "phoneNumber": validate_phone_number(phone_number),
        }
        logger.info(f"Uploading media for {mask_phone_number(form['phoneNumber'])}")

        response_data = self.http_client.post(MEDIA_UPLOAD_PATH, form)
        return _parse("Media upload", lambda: UploadMediaResult.model_validate(response_data))

    def send_mobile_data(
        self, product_name: str, recipients: Iterable[MobileDataRecipient]
    ) -> MobileDataResult:
        """
        Send mobile data bundles to one or more phone numbers.

        Args:
            product_name: Mobile data product created on the dashboard
            recipients: Bundles to send

        Example:
            >>> result = client.send_mobile_data("datatest", [
            ...     MobileDataRecipient(phone_number="+254711XXXYYY", quantity=50),
            ... ])
            >>> print([entry.status for entry in result.entries])
        """
        payload = _mobile_data_payload(product_name, recipients)
        logger.info(f"Sending mobile data to {len(payload['recipients'])} recipient(s)")

        response_data = self.http_client.post_json(MOBILE_DATA_PATH, payload)
        return _parse("Mobile data request", lambda: MobileDataResult.model_validate(response_data))


class AsyncAtClient:
    """
    Async client for the Africa's Talking REST API.

    Example:
        >>> import asyncio
        >>> from at_connect import AsyncAtClient
        >>>
        >>> async def notify(numbers):
        ...     async with AsyncAtClient(api_key='your-api-key', username='sandbox') as client:
        ...         tasks = [client.send_sms(number, 'Your order shipped') for number in numbers]
        ...         return await asyncio.gather(*tasks)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        username: Optional[str] = None,
        config: Optional[AtConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the async client."""
        self.config = _resolve_config(api_key, username, config)
        self.http_client = AsyncHttpClient(self.config, transport=transport)

        logger.info(f"Async Africa's Talking client initialized ({self.config.environment.value})")

    async def __aenter__(self) -> "AsyncAtClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the async client."""
        await self.http_client.close()
        logger.info("Async Africa's Talking client closed")

    async def send_sms(
        self,
        to: PhoneNumbers,
        message: str,
        sender_id: Optional[str] = None,
        enqueue: bool = False,
        keyword: Optional[str] = None,
        link_id: Optional[str] = None,
        retry_duration_in_hours: Optional[int] = None,
    ) -> SendSmsResult:
        """Asynchronously send an SMS. See :meth:`AtClient.send_sms`."""
        form = _sms_form(to, message, sender_id, enqueue, keyword, link_id, retry_duration_in_hours)
        logger.info(f"Async sending SMS to {form['to'].count(',') + 1} recipient(s)")

        response_data = await self.http_client.post(SMS_PATH, form)
        return _parse("SMS send", lambda: SendSmsResult.from_response(response_data))

    async def fetch_messages(self, last_received_id: Optional[int] = None) -> List[InboundSms]:
        """Asynchronously fetch inbound messages."""
        response_data = await self.http_client.get(SMS_PATH, {"lastReceivedId": last_received_id or 0})
        return _parse("SMS fetch", lambda: _parse_messages(response_data))

    async def send_airtime(self, recipients: Iterable[AirtimeRecipient]) -> AirtimeResult:
        """Asynchronously send airtime."""
        form = _airtime_form(recipients)
        response_data = await self.http_client.post(AIRTIME_PATH, form)
        return _parse("Airtime send", lambda: AirtimeResult.model_validate(response_data))

    async def get_application_data(self) -> ApplicationData:
        """Asynchronously retrieve application data."""
        response_data = await self.http_client.get(USER_PATH)
        return _parse("Application data", lambda: ApplicationData.from_response(response_data))

    async def make_call(
        self,
        call_from: str,
        call_to: PhoneNumbers,
        client_request_id: Optional[str] = None,
    ) -> MakeCallResult:
        """Asynchronously place an outbound call."""
        form = _call_form(call_from, call_to, client_request_id)
        logger.info(f"Async placing call from {mask_phone_number(form['from'])}")

        response_data = await self.http_client.post(CALL_PATH, form)
        return _parse("Call request", lambda: MakeCallResult.model_validate(response_data))

    async def get_queued_calls(self, phone_numbers: PhoneNumbers) -> QueueStatusResult:
        """Asynchronously query queue status."""
        numbers = validate_phone_numbers(phone_numbers)
        response_data = await self.http_client.post(
            QUEUE_STATUS_PATH, {"phoneNumbers": ",".join(numbers)}
        )
        return _parse("Queue status", lambda: QueueStatusResult.model_validate(response_data))

    async def upload_media(self, url: str, phone_number: str) -> UploadMediaResult:
        """Asynchronously upload a media file."""
        form = {
            "url": validate_url(url),
            "phoneNumber": validate_phone_number(phone_number),
        }
        response_data = await self.http_client.post(MEDIA_UPLOAD_PATH, form)
        return _parse("Media upload", lambda: UploadMediaResult.model_validate(response_data))

    async def send_mobile_data(
        self, product_name: str, recipients: Iterable[MobileDataRecipient]
    ) -> MobileDataResult:
        """Asynchronously send mobile data bundles."""
        payload = _mobile_data_payload(product_name, recipients)
        response_data = await self.http_client.post_json(MOBILE_DATA_PATH, payload)
        return _parse("Mobile data request", lambda: MobileDataResult.model_validate(response_data))
