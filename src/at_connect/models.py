"""
@file models.py
@description Pydantic models for Africa's Talking REST requests and responses
@module at_connect.models
@author AT-Connect Team
@created 2025-01-15
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from at_connect.validators import (
    validate_amount,
    validate_currency_code,
    validate_phone_number,
    validate_positive_int,
)

# Recipient status codes the gateway reports for accepted messages.
SMS_SUCCESS_STATUS_CODES = frozenset({100, 101, 102})


class Currency(str, Enum):
    """Currencies supported for airtime and payments."""

    KES = "KES"
    USD = "USD"
    UGX = "UGX"
    TZS = "TZS"
    RWF = "RWF"
    ZMW = "ZMW"
    NGN = "NGN"
    GHS = "GHS"


class SmsRecipient(BaseModel):
    """
    Delivery outcome for a single SMS recipient.

    Attributes:
        status_code: Gateway status code (100-102 mean accepted)
        number: Recipient phone number
        status: Status label (Success, InvalidPhoneNumber, ...)
        cost: Cost charged for this recipient, currency-prefixed
        message_id: Gateway message identifier
    """

    status_code: int = Field(..., alias="statusCode", description="Gateway status code")
    number: str = Field(..., description="Recipient phone number")
    status: str = Field(..., description="Status label")
    cost: str = Field("0", description="Cost for this recipient")
    message_id: Optional[str] = Field(None, alias="messageId", description="Message identifier")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @property
    def is_successful(self) -> bool:
        return self.status_code in SMS_SUCCESS_STATUS_CODES


class SendSmsResult(BaseModel):
    """
    Result of sending an SMS to one or more recipients.

    Example:
        >>> result = client.send_sms(["+254711XXXYYY"], "Hello")
        >>> for recipient in result.recipients:
        ...     print(recipient.number, recipient.status)
    """

    message: str = Field(..., description="Summary message from the gateway")
    recipients: List[SmsRecipient] = Field(default_factory=list, description="Per-recipient outcome")
    sent_at: datetime = Field(default_factory=datetime.now, description="Request timestamp")

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "SendSmsResult":
        payload = data.get("SMSMessageData", {})
        return cls(
            message=payload.get("Message", ""),
            recipients=payload.get("Recipients", []),
        )

    @property
    def successful_recipients(self) -> List[SmsRecipient]:
        return [recipient for recipient in self.recipients if recipient.is_successful]


class InboundSms(BaseModel):
    """An SMS received on one of the application's short codes or keywords."""

    id: int = Field(..., description="Message identifier, used as lastReceivedId")
    text: str = Field(..., description="Message body")
    from_number: str = Field(..., alias="from", description="Sender phone number")
    to: str = Field(..., description="Short code or number the message was sent to")
    date: str = Field(..., description="Receipt timestamp")
    link_id: Optional[str] = Field(None, alias="linkId", description="Premium SMS link identifier")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class AirtimeRecipient(BaseModel):
    """
    One airtime top-up in a send request.

    Example:
        >>> AirtimeRecipient(phone_number="+254711XXXYYY", amount=100, currency_code="KES")
    """

    phone_number: str = Field(..., description="Recipient phone number")
    amount: float = Field(..., description="Top-up amount")
    currency_code: str = Field(Currency.KES.value, description="ISO 4217 currency code")

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str) -> str:
        return validate_phone_number(value)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: float) -> float:
        return validate_amount(value)

    @field_validator("currency_code", mode="before")
    @classmethod
    def check_currency_code(cls, value: Any) -> str:
        if isinstance(value, Currency):
            value = value.value
        return validate_currency_code(value)

    def to_payload(self) -> Dict[str, str]:
        """Wire representation used inside the ``recipients`` form field."""
        return {
            "phoneNumber": self.phone_number,
            "currencyCode": self.currency_code,
            "amount": f"{self.amount:.2f}",
        }


class AirtimeResponseEntry(BaseModel):
    """Outcome of one airtime top-up."""

    phone_number: str = Field(..., alias="phoneNumber", description="Recipient phone number")
    amount: str = Field(..., description="Amount sent, currency-prefixed")
    status: str = Field(..., description="Sent, Failed, ...")
    request_id: Optional[str] = Field(None, alias="requestId", description="Request identifier")
    discount: str = Field("0", description="Discount applied")
    error_message: Optional[str] = Field(None, alias="errorMessage", description="Failure reason")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class AirtimeResult(BaseModel):
    """Result of an airtime send request."""

    error_message: Optional[str] = Field(None, alias="errorMessage", description="Request-level error")
    num_sent: int = Field(0, alias="numSent", description="Number of top-ups sent")
    total_amount: str = Field("0", alias="totalAmount", description="Total amount sent")
    total_discount: str = Field("0", alias="totalDiscount", description="Total discount")
    responses: List[AirtimeResponseEntry] = Field(
        default_factory=list, description="Per-recipient outcome"
    )

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @property
    def has_error(self) -> bool:
        # the gateway sends the literal string "None" on success
        return bool(self.error_message) and self.error_message != "None"


class ApplicationData(BaseModel):
    """Application account data; currently just the wallet balance."""

    balance: str = Field(..., description="Balance, currency-prefixed (e.g. KES 1785.50)")

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ApplicationData":
        return cls(**data.get("UserData", {}))


class CallEntry(BaseModel):
    """One destination of an outbound call request."""

    phone_number: str = Field(..., alias="phoneNumber", description="Destination phone number")
    status: str = Field(..., description="Queued, InvalidPhoneNumber, ...")
    session_id: Optional[str] = Field(None, alias="sessionId", description="Call session identifier")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @property
    def is_queued(self) -> bool:
        return self.status == "Queued"


class MakeCallResult(BaseModel):
    """Result of an outbound call request."""

    entries: List[CallEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("entries", "Entries"),
        description="Per-destination outcome",
    )
    error_message: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("errorMessage", "ErrorMessage"),
        description="Request-level error",
    )


class QueuedNumber(BaseModel):
    """Queue depth for one of the application's phone numbers."""

    phone_number: str = Field(
        ..., validation_alias=AliasChoices("phoneNumber", "PhoneNumber"), description="Phone number"
    )
    num_calls: int = Field(
        0,
        validation_alias=AliasChoices("numCalls", "NumQueuedCalls", "numQueuedCalls"),
        description="Calls waiting in the queue",
    )
    queue_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("queueName", "QueueName"), description="Queue name"
    )


class QueueStatusResult(BaseModel):
    """Result of a queue status query."""

    status: str = Field(
        "", validation_alias=AliasChoices("status", "Status"), description="Request status"
    )
    entries: List[QueuedNumber] = Field(
        default_factory=list,
        validation_alias=AliasChoices("entries", "Entries", "PhoneNumbers"),
        description="Per-number queue depth",
    )
    error_message: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("errorMessage", "ErrorMessage"),
        description="Request-level error",
    )

    @property
    def num_queued_calls(self) -> int:
        return sum(entry.num_calls for entry in self.entries)


class UploadMediaResult(BaseModel):
    """Result of a media upload request."""

    status: Optional[str] = Field(None, description="Upload status")
    error_message: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("errorMessage", "ErrorMessage"),
        description="Upload error",
    )


class DataUnit(str, Enum):
    """Bundle size units accepted by the mobile data API."""

    MB = "MB"
    GB = "GB"


class DataValidity(str, Enum):
    """How long a mobile data bundle stays valid."""

    DAY = "Day"
    WEEK = "Week"
    BIWEEK = "BiWeek"
    MONTH = "Month"
    QUARTERLY = "Quarterly"


class MobileDataRecipient(BaseModel):
    """
    One bundle in a mobile data request.

    Example:
        >>> MobileDataRecipient(
        ...     phone_number="+254711XXXYYY", quantity=50,
        ...     unit=DataUnit.MB, validity=DataValidity.DAY,
        ...     metadata={"transactionId": "txn_1234"},
        ... )
    """

    phone_number: str = Field(..., description="Recipient phone number")
    quantity: int = Field(..., description="Bundle size in ``unit``")
    unit: DataUnit = Field(DataUnit.MB, description="Bundle size unit")
    validity: DataValidity = Field(DataValidity.DAY, description="Bundle validity period")
    is_promo_bundle: bool = Field(False, description="Send as a promotional bundle")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Echoed in notifications")

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str) -> str:
        return validate_phone_number(value)

    @field_validator("quantity")
    @classmethod
    def check_quantity(cls, value: int) -> int:
        return validate_positive_int(value, "quantity")

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation of one entry of the ``recipients`` array."""
        return {
            "phoneNumber": self.phone_number,
            "quantity": self.quantity,
            "unit": self.unit.value,
            "validity": self.validity.value,
            "isPromoBundle": self.is_promo_bundle,
            "metadata": self.metadata,
        }


class MobileDataEntry(BaseModel):
    """Outcome of one bundle request."""

    phone_number: str = Field(
        ..., validation_alias=AliasChoices("phoneNumber", "PhoneNumber"), description="Phone number"
    )
    provider: Optional[str] = Field(None, description="Telco that fulfils the bundle")
    status: str = Field(..., description="Queued, InvalidRequest, ...")
    transaction_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("transactionId", "TransactionId"),
        description="Gateway transaction identifier",
    )
    value: Optional[str] = Field(None, description="Bundle value, currency-prefixed")
    error_message: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("errorMessage", "ErrorMessage"),
        description="Failure reason",
    )

    @property
    def is_queued(self) -> bool:
        return self.status == "Queued"


class MobileDataResult(BaseModel):
    """Result of a mobile data request."""

    entries: List[MobileDataEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("entries", "Entries", "responses"),
        description="Per-recipient outcome",
    )
