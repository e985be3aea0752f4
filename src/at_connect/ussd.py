"""
@file ussd.py
@description USSD webhook models and CON/END response rendering
@module at_connect.ussd
@author AT-Connect Team
@created 2025-01-15

The gateway calls the application's USSD callback once per user turn and
expects a plain-text body starting with ``CON `` (prompt again) or ``END ``
(close the session). Session state is the embedding application's concern:
key it by ``session_id``.

Example:
    >>> from at_connect.ussd import UssdSessionRequest, UssdMenu, UssdResponse
    >>> def handle_ussd(form: dict) -> str:
    ...     request = UssdSessionRequest.model_validate(form)
    ...     if request.is_initial():
    ...         return str(
    ...             UssdMenu("Welcome")
    ...             .add_option("1", "My account")
    ...             .add_option("2", "My phone number")
    ...             .build_continue()
    ...         )
    ...     if request.matches_path("2"):
    ...         return str(UssdResponse.ends(f"Your number is {request.phone_number}"))
    ...     return str(UssdResponse.ends("Invalid choice"))
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from at_connect.exceptions import ValidationError
from at_connect.network import NetworkCode

logger = logging.getLogger(__name__)

USSD_CONTENT_TYPE = "text/plain"

CONTINUE_PREFIX = "CON "
END_PREFIX = "END "
PATH_SEPARATOR = "*"


class UssdSessionRequest(BaseModel):
    """
    One inbound USSD webhook delivery.

    ``text`` is the accumulated navigation trail: every keystroke entered
    so far in the session, joined by ``*``. It is empty on the first turn,
    so after ``n`` turns of one token each it holds ``n - 1`` separators.

    Attributes:
        session_id: Session token, stable for every turn of one dialog
        service_code: The dialed short code (e.g. ``*384*123#``)
        phone_number: Subscriber phone number
        text: Navigation trail, e.g. ``""`` -> ``"1"`` -> ``"1*2"``
        network_code: Telco network code (see :class:`NetworkCode`)

    Example:
        >>> request = UssdSessionRequest.model_validate({
        ...     "sessionId": "ATUid_1", "serviceCode": "*384*123#",
        ...     "phoneNumber": "+254711000111", "text": "1*2*3",
        ...     "networkCode": "63902",
        ... })
        >>> request.depth(), request.current_input()
        (3, '3')
    """

    session_id: str = Field(..., alias="sessionId", description="USSD session identifier")
    service_code: str = Field(..., alias="serviceCode", description="Dialed USSD code")
    phone_number: str = Field(..., alias="phoneNumber", description="Subscriber phone number")
    text: str = Field("", description="Asterisk-joined keystroke trail")
    network_code: str = Field(..., alias="networkCode", description="Telco network code")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        frozen = True

    def is_initial(self) -> bool:
        """True on the first turn of the session, before any input."""
        return self.text == ""

    def depth(self) -> int:
        """Number of keystroke tokens entered so far (0 on the first turn)."""
        return len(self.navigation_path())

    def current_input(self) -> Optional[str]:
        """The token entered on this turn, or None on the first turn."""
        path = self.navigation_path()
        return path[-1] if path else None

    def navigation_path(self) -> List[str]:
        """
        All tokens of the trail, in entry order.

        Example:
            >>> UssdSessionRequest(session_id="s", service_code="*1#",
            ...     phone_number="+254711000111", text="1*2*3",
            ...     network_code="63902").navigation_path()
            ['1', '2', '3']
        """
        if not self.text:
            return []
        return self.text.split(PATH_SEPARATOR)

    def matches_path(self, candidate: str) -> bool:
        """Exact comparison of the whole trail with ``candidate``."""
        return self.text == candidate

    def starts_with_path(self, prefix: str) -> bool:
        """
        Raw string-prefix match on the trail.

        Not token aware: ``"1*2"`` also matches a trail of ``"1*20"``.
        Compare :meth:`navigation_path` slices when token boundaries matter.
        """
        return self.text.startswith(prefix)

    @property
    def network(self) -> NetworkCode:
        """The subscriber's telco, resolved from ``network_code``."""
        return NetworkCode.from_code(self.network_code)


class UssdSessionStatus(str, Enum):
    """Final state of a USSD session as reported in the end-of-session notification."""

    SUCCESS = "Success"
    INCOMPLETE = "Incomplete"
    FAILED = "Failed"


class UssdNotification(BaseModel):
    """
    End-of-session notification sent to the notification callback URL.

    Informational only: the gateway ignores the response body.

    Attributes:
        date: Notification timestamp (UTC, ``yyyy-MM-dd HH:mm:ss``)
        session_id: Session identifier, same as in the turn requests
        service_code: USSD code of the application
        network_code: Telco network code
        phone_number: Subscriber phone number
        status: Success, Incomplete or Failed
        cost: Session cost, currency-prefixed (e.g. ``KES 0.0500``)
        duration_in_millis: Session duration in milliseconds
        hops_count: Number of turns the subscriber went through
        input: Full navigation trail at session end
        last_app_response: Last body returned by the application
        error_message: Failure reason for failed sessions
    """

    date: str = Field(..., description="Notification timestamp")
    session_id: str = Field(..., alias="sessionId", description="USSD session identifier")
    service_code: str = Field(..., alias="serviceCode", description="USSD code")
    network_code: str = Field(..., alias="networkCode", description="Telco network code")
    phone_number: str = Field(..., alias="phoneNumber", description="Subscriber phone number")
    status: UssdSessionStatus = Field(..., description="Session completion status")
    cost: str = Field(..., description="Session cost")
    duration_in_millis: int = Field(..., alias="durationInMillis", description="Session duration")
    hops_count: int = Field(..., alias="hopsCount", description="Number of turns")
    input: str = Field("", description="Navigation trail at session end")
    last_app_response: str = Field(
        "", alias="lastAppResponse", description="Last application response"
    )
    error_message: Optional[str] = Field(
        None, alias="errorMessage", description="Failure reason"
    )

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        frozen = True

    @property
    def is_successful(self) -> bool:
        return self.status == UssdSessionStatus.SUCCESS

    @property
    def network(self) -> NetworkCode:
        return NetworkCode.from_code(self.network_code)


@dataclass(frozen=True)
class UssdResponse:
    """
    Outbound USSD decision: keep the session open or end it.

    The ``CON ``/``END `` prefix is added at render time and is a wire
    contract with the gateway, so messages that already carry one are
    rejected.

    Example:
        >>> str(UssdResponse.continues("Pick one"))
        'CON Pick one'
        >>> UssdResponse.ends("Bye").to_string()
        'END Bye'
    """

    message: str
    continuing: bool

    def __post_init__(self) -> None:
        if not isinstance(self.message, str):
            raise ValidationError("message", "USSD message must be a string")
        if self.message.startswith((CONTINUE_PREFIX, END_PREFIX)):
            raise ValidationError(
                "message",
                "USSD message must not start with 'CON ' or 'END '; "
                "use UssdResponse.continues() or UssdResponse.ends()",
            )

    @classmethod
    def continues(cls, message: str) -> "UssdResponse":
        """Response that keeps the session open for more input."""
        return cls(message=message, continuing=True)

    @classmethod
    def ends(cls, message: str) -> "UssdResponse":
        """Response that terminates the session after delivery."""
        return cls(message=message, continuing=False)

    @property
    def is_continuing(self) -> bool:
        return self.continuing

    @property
    def is_ending(self) -> bool:
        return not self.continuing

    def to_string(self) -> str:
        prefix = CONTINUE_PREFIX if self.continuing else END_PREFIX
        return prefix + self.message

    def to_bytes(self) -> bytes:
        """UTF-8 encoded response body."""
        return self.to_string().encode("utf-8")

    def __str__(self) -> str:
        return self.to_string()


MenuOption = Tuple[str, str]


class UssdMenu:
    """
    Builder for numbered USSD menus.

    Options render in insertion order as ``"{key}. {label}"`` lines under
    the header. Keys are not checked for uniqueness.

    Example:
        >>> menu = (
        ...     UssdMenu("Pick:")
        ...     .add_option("1", "A")
        ...     .add_option("2", "B")
        ...     .build_continue()
        ... )
        >>> str(menu)
        'CON Pick:\\n1. A\\n2. B'
    """

    def __init__(self, header: str) -> None:
        self.header = header
        self.options: List[MenuOption] = []

    def add_option(self, key: Union[str, int], label: str) -> "UssdMenu":
        """Append one option; returns the menu for chaining."""
        self.options.append((str(key), str(label)))
        return self

    def add_options(
        self,
        options: Union[Iterable[Tuple[Union[str, int], str]], Mapping[Union[str, int], str]],
    ) -> "UssdMenu":
        """Append several (key, label) pairs in order; mappings use their item order."""
        pairs = options.items() if isinstance(options, Mapping) else options
        for key, label in pairs:
            self.add_option(key, label)
        return self

    def render(self) -> str:
        """Header and option lines joined with newlines, without a protocol prefix."""
        lines = [self.header]
        lines.extend(f"{key}. {label}" for key, label in self.options)
        return "\n".join(lines)

    def build_continue(self) -> UssdResponse:
        logger.debug(f"Rendering USSD menu with {len(self.options)} option(s)")
        return UssdResponse.continues(self.render())

    def build_end(self) -> UssdResponse:
        logger.debug(f"Rendering final USSD menu with {len(self.options)} option(s)")
        return UssdResponse.ends(self.render())

    def __len__(self) -> int:
        return len(self.options)
