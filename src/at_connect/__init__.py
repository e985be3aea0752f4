"""
AT-Connect Python SDK

Python SDK for Africa's Talking. Renders USSD ``CON``/``END`` replies and
voice action XML for webhook handlers, and wraps the SMS, airtime,
mobile data, application and voice REST APIs.

Example:
    >>> from at_connect import ActionBuilder, UssdResponse
    >>> str(UssdResponse.ends("Thank you"))
    'END Thank you'
    >>> ActionBuilder().say("Hello").build()
    '<?xml version="1.0" encoding="UTF-8"?><Response><Say>Hello</Say></Response>'
"""

from at_connect.client import AtClient, AsyncAtClient
from at_connect.config import AtConfig, Environment, RetryConfig
from at_connect.exceptions import (
    AfricasTalkingError,
    ConfigurationError,
    ValidationError,
    ApiAuthenticationError,
    ApiTimeoutError,
    RateLimitExceededError,
    ApiError,
)
from at_connect.models import (
    Currency,
    SendSmsResult,
    SmsRecipient,
    InboundSms,
    AirtimeRecipient,
    AirtimeResult,
    ApplicationData,
    MakeCallResult,
    QueueStatusResult,
    UploadMediaResult,
    DataUnit,
    DataValidity,
    MobileDataRecipient,
    MobileDataResult,
)
from at_connect.network import NetworkCode
from at_connect.ussd import (
    UssdMenu,
    UssdNotification,
    UssdResponse,
    UssdSessionRequest,
    UssdSessionStatus,
)
from at_connect.voice import (
    ActionBuilder,
    DialAction,
    EnqueueAttributes,
    GetDigitsAction,
    RecordAction,
    SayAttributes,
    VoiceCallback,
)

__version__ = "0.1.0"
__author__ = "AT-Connect Team"
__license__ = "MIT"

__all__ = [
    # Clients
    "AtClient",
    "AsyncAtClient",
    # Configuration
    "AtConfig",
    "Environment",
    "RetryConfig",
    # USSD
    "UssdMenu",
    "UssdNotification",
    "UssdResponse",
    "UssdSessionRequest",
    "UssdSessionStatus",
    # Voice
    "ActionBuilder",
    "DialAction",
    "EnqueueAttributes",
    "GetDigitsAction",
    "RecordAction",
    "SayAttributes",
    "VoiceCallback",
    # Network
    "NetworkCode",
    # Models
    "Currency",
    "SendSmsResult",
    "SmsRecipient",
    "InboundSms",
    "AirtimeRecipient",
    "AirtimeResult",
    "ApplicationData",
    "MakeCallResult",
    "QueueStatusResult",
    "UploadMediaResult",
    "DataUnit",
    "DataValidity",
    "MobileDataRecipient",
    "MobileDataResult",
    # Exceptions
    "AfricasTalkingError",
    "ConfigurationError",
    "ValidationError",
    "ApiAuthenticationError",
    "ApiTimeoutError",
    "RateLimitExceededError",
    "ApiError",
]
