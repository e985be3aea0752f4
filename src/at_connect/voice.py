"""
@file voice.py
@description Voice callback model and XML action builder
@module at_connect.voice
@author AT-Connect Team
@created 2025-01-15

When a call connects, the gateway POSTs to the voice callback URL and
executes the actions in the returned XML document, in order.

Example:
    >>> from at_connect.voice import ActionBuilder, GetDigitsAction
    >>> xml = (
    ...     ActionBuilder()
    ...     .say("Welcome to our service")
    ...     .get_digits(
    ...         GetDigitsAction()
    ...         .say("Press 1 for support")
    ...         .num_digits(1)
    ...         .finish_on_key("#")
    ...     )
    ...     .build()
    ... )
"""

import copy
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from at_connect.exceptions import ValidationError
from at_connect.validators import (
    validate_finish_on_key,
    validate_positive_int,
    validate_required_text,
    validate_url,
)

logger = logging.getLogger(__name__)

VOICE_CONTENT_TYPE = "application/xml"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _xml_bool(value: bool) -> str:
    return "true" if value else "false"


def _set_attributes(element: ET.Element, attributes: Dict[str, Optional[str]]) -> ET.Element:
    """Copy attributes in order, skipping unset ones."""
    for name, value in attributes.items():
        if value is not None:
            element.set(name, value)
    return element


class VoiceCallback(BaseModel):
    """
    Inbound voice webhook delivery.

    ``dtmf_digits`` and ``recording_url`` are None when the gateway did not
    send them, which is distinct from an empty value.

    Attributes:
        is_active: ``"1"`` while the call is up, ``"0"`` on the final notification
        session_id: Call session identifier
        direction: ``Inbound`` or ``Outbound``
        caller_number: Calling party
        destination_number: Called party
        dtmf_digits: Digits collected by a previous GetDigits action
        recording_url: Recording produced by a previous Record action
    """

    is_active: str = Field(..., alias="isActive", description="Call active flag")
    session_id: str = Field(..., alias="sessionId", description="Call session identifier")
    direction: str = Field(..., description="Inbound or Outbound")
    caller_number: str = Field(..., alias="callerNumber", description="Calling party")
    destination_number: str = Field(
        ..., alias="destinationNumber", description="Called party"
    )
    dtmf_digits: Optional[str] = Field(None, alias="dtmfDigits", description="Collected digits")
    recording_url: Optional[str] = Field(None, alias="recordingUrl", description="Recording URL")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        frozen = True

    @property
    def active(self) -> bool:
        return self.is_active == "1"

    @property
    def is_inbound(self) -> bool:
        return self.direction.lower() == "inbound"


@dataclass(frozen=True)
class SayAttributes:
    """Optional attributes of a Say action."""

    voice: Optional[str] = None
    play_beep: Optional[bool] = None

    def to_attributes(self) -> Dict[str, Optional[str]]:
        return {
            "voice": self.voice,
            "playBeep": None if self.play_beep is None else _xml_bool(self.play_beep),
        }


@dataclass(frozen=True)
class EnqueueAttributes:
    """Optional attributes of an Enqueue action."""

    hold_music: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Say:
    text: str
    attributes: Optional[SayAttributes] = None

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise ValidationError("text", "Say text must be a string")

    def to_element(self) -> ET.Element:
        element = ET.Element("Say")
        if self.attributes is not None:
            _set_attributes(element, self.attributes.to_attributes())
        element.text = self.text
        return element


@dataclass(frozen=True)
class Play:
    url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", validate_url(self.url))

    def to_element(self) -> ET.Element:
        return _set_attributes(ET.Element("Play"), {"url": self.url})


Prompt = Union[Say, Play]


class GetDigitsAction:
    """
    Collects DTMF digits, optionally after a Say or Play prompt.

    The digits are POSTed to ``callback_url`` (or the application's
    default callback) as ``dtmfDigits``.
    """

    def __init__(self) -> None:
        self._prompt: Optional[Prompt] = None
        self._num_digits: Optional[int] = None
        self._finish_on_key: Optional[str] = None
        self._timeout: Optional[int] = None
        self._callback_url: Optional[str] = None

    def say(self, text: str, attributes: Optional[SayAttributes] = None) -> "GetDigitsAction":
        self._prompt = Say(text, attributes)
        return self

    def play(self, url: str) -> "GetDigitsAction":
        self._prompt = Play(url)
        return self

    def num_digits(self, count: int) -> "GetDigitsAction":
        self._num_digits = validate_positive_int(count, "num_digits")
        return self

    def finish_on_key(self, key: str) -> "GetDigitsAction":
        self._finish_on_key = validate_finish_on_key(key)
        return self

    def timeout(self, seconds: int) -> "GetDigitsAction":
        self._timeout = validate_positive_int(seconds, "timeout")
        return self

    def callback_url(self, url: str) -> "GetDigitsAction":
        self._callback_url = validate_url(url, "callback_url")
        return self

    def to_element(self) -> ET.Element:
        element = _set_attributes(
            ET.Element("GetDigits"),
            {
                "numDigits": None if self._num_digits is None else str(self._num_digits),
                "finishOnKey": self._finish_on_key,
                "timeout": None if self._timeout is None else str(self._timeout),
                "callbackUrl": self._callback_url,
            },
        )
        if self._prompt is not None:
            element.append(self._prompt.to_element())
        return element


class DialAction:
    """
    Connects the caller to one or more phone numbers or SIP addresses.

    Destinations are rung in parallel unless ``sequential(True)`` is set.
    """

    def __init__(self, phone_numbers: Union[str, Iterable[str]]) -> None:
        if isinstance(phone_numbers, str):
            phone_numbers = [phone_numbers]
        numbers = [validate_required_text(number, "phone_numbers") for number in phone_numbers]
        if not numbers:
            raise ValidationError("phone_numbers", "At least one destination is required")

        self.phone_numbers: List[str] = numbers
        self._caller_id: Optional[str] = None
        self._record: Optional[bool] = None
        self._sequential: Optional[bool] = None
        self._max_duration: Optional[int] = None
        self._ring_back_tone: Optional[str] = None

    def caller_id(self, caller_id: str) -> "DialAction":
        self._caller_id = validate_required_text(caller_id, "caller_id")
        return self

    def record(self, enabled: bool = True) -> "DialAction":
        self._record = bool(enabled)
        return self

    def sequential(self, enabled: bool = True) -> "DialAction":
        self._sequential = bool(enabled)
        return self

    def max_duration(self, seconds: int) -> "DialAction":
        self._max_duration = validate_positive_int(seconds, "max_duration")
        return self

    def ring_back_tone(self, url: str) -> "DialAction":
        self._ring_back_tone = validate_url(url, "ring_back_tone")
        return self

    def to_element(self) -> ET.Element:
        return _set_attributes(
            ET.Element("Dial"),
            {
                "phoneNumbers": ",".join(self.phone_numbers),
                "callerId": self._caller_id,
                "record": None if self._record is None else _xml_bool(self._record),
                "sequential": None if self._sequential is None else _xml_bool(self._sequential),
                "maxDuration": None if self._max_duration is None else str(self._max_duration),
                "ringBackTone": self._ring_back_tone,
            },
        )


class RecordAction:
    """
    Records the caller, optionally after a Say or Play prompt.

    Recording stops on ``finish_on_key``, after ``max_length`` seconds or
    after ``timeout`` seconds of silence.
    """

    def __init__(self) -> None:
        self._prompt: Optional[Prompt] = None
        self._finish_on_key: Optional[str] = None
        self._max_length: Optional[int] = None
        self._timeout: Optional[int] = None
        self._play_beep: Optional[bool] = None
        self._trim_silence: Optional[bool] = None
        self._callback_url: Optional[str] = None

    def say(self, text: str, attributes: Optional[SayAttributes] = None) -> "RecordAction":
        self._prompt = Say(text, attributes)
        return self

    def play(self, url: str) -> "RecordAction":
        self._prompt = Play(url)
        return self

    def finish_on_key(self, key: str) -> "RecordAction":
        self._finish_on_key = validate_finish_on_key(key)
        return self

    def max_length(self, seconds: int) -> "RecordAction":
        self._max_length = validate_positive_int(seconds, "max_length")
        return self

    def timeout(self, seconds: int) -> "RecordAction":
        self._timeout = validate_positive_int(seconds, "timeout")
        return self

    def play_beep(self, enabled: bool = True) -> "RecordAction":
        self._play_beep = bool(enabled)
        return self

    def trim_silence(self, enabled: bool = True) -> "RecordAction":
        self._trim_silence = bool(enabled)
        return self

    def callback_url(self, url: str) -> "RecordAction":
        self._callback_url = validate_url(url, "callback_url")
        return self

    def to_element(self) -> ET.Element:
        element = _set_attributes(
            ET.Element("Record"),
            {
                "finishOnKey": self._finish_on_key,
                "maxLength": None if self._max_length is None else str(self._max_length),
                "timeout": None if self._timeout is None else str(self._timeout),
                "playBeep": None if self._play_beep is None else _xml_bool(self._play_beep),
                "trimSilence": None if self._trim_silence is None else _xml_bool(self._trim_silence),
                "callbackUrl": self._callback_url,
            },
        )
        if self._prompt is not None:
            element.append(self._prompt.to_element())
        return element


@dataclass(frozen=True)
class Enqueue:
    attributes: Optional[EnqueueAttributes] = None

    def to_element(self) -> ET.Element:
        element = ET.Element("Enqueue")
        if self.attributes is not None:
            _set_attributes(
                element,
                {"holdMusic": self.attributes.hold_music, "name": self.attributes.name},
            )
        return element


@dataclass(frozen=True)
class Dequeue:
    phone_number: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        validate_required_text(self.phone_number, "phone_number")

    def to_element(self) -> ET.Element:
        return _set_attributes(
            ET.Element("Dequeue"),
            {"phoneNumber": self.phone_number, "name": self.name},
        )


@dataclass(frozen=True)
class Conference:
    def to_element(self) -> ET.Element:
        return ET.Element("Conference")


@dataclass(frozen=True)
class Redirect:
    url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", validate_url(self.url))

    def to_element(self) -> ET.Element:
        element = ET.Element("Redirect")
        element.text = self.url
        return element


@dataclass(frozen=True)
class Reject:
    def to_element(self) -> ET.Element:
        return ET.Element("Reject")


VoiceAction = Union[
    Say, Play, GetDigitsAction, DialAction, RecordAction,
    Enqueue, Dequeue, Conference, Redirect, Reject,
]


class ActionBuilder:
    """
    Accumulates voice actions and renders the ``<Response>`` document.

    Every method appends exactly one action and returns the builder, so
    document order is call order. Nothing is checked across actions:
    actions after Reject or Redirect are still rendered and the gateway
    decides what to do with them.

    Example:
        >>> ActionBuilder().say("Hi").build()
        '<?xml version="1.0" encoding="UTF-8"?><Response><Say>Hi</Say></Response>'
    """

    def __init__(self) -> None:
        self._actions: List[VoiceAction] = []

    def _append(self, action: VoiceAction) -> "ActionBuilder":
        self._actions.append(action)
        return self

    def say(self, text: str, attributes: Optional[SayAttributes] = None) -> "ActionBuilder":
        """Text-to-speech."""
        return self._append(Say(text, attributes))

    def play(self, url: str) -> "ActionBuilder":
        """Play a hosted audio file."""
        return self._append(Play(url))

    def get_digits(self, action: GetDigitsAction) -> "ActionBuilder":
        """Append a snapshot of ``action``; later changes to it are not seen."""
        return self._append(copy.deepcopy(action))

    def dial(self, action: DialAction) -> "ActionBuilder":
        return self._append(copy.deepcopy(action))

    def record(self, action: RecordAction) -> "ActionBuilder":
        return self._append(copy.deepcopy(action))

    def enqueue(self, attributes: Optional[EnqueueAttributes] = None) -> "ActionBuilder":
        """Place the caller in a queue, optionally a named one with hold music."""
        return self._append(Enqueue(attributes))

    def dequeue(self, phone_number: str, name: Optional[str] = None) -> "ActionBuilder":
        """Bridge the agent on ``phone_number`` to the next caller in the queue."""
        return self._append(Dequeue(phone_number, name))

    def conference(self) -> "ActionBuilder":
        return self._append(Conference())

    def redirect(self, url: str) -> "ActionBuilder":
        """Hand the call over to another callback URL."""
        return self._append(Redirect(url))

    def reject(self) -> "ActionBuilder":
        """Hang up on the caller immediately."""
        return self._append(Reject())

    @property
    def actions(self) -> Tuple[VoiceAction, ...]:
        """Copies of the appended actions, in document order."""
        return tuple(copy.deepcopy(self._actions))

    def __len__(self) -> int:
        return len(self._actions)

    def to_element(self) -> ET.Element:
        root = ET.Element("Response")
        for action in self._actions:
            root.append(action.to_element())
        return root

    def build(self) -> str:
        """
        Render the XML document.

        The builder stays usable; calling ``build`` again after adding
        more actions renders the longer document.
        """
        logger.debug(f"Rendering voice response with {len(self._actions)} action(s)")
        return XML_DECLARATION + ET.tostring(self.to_element(), encoding="unicode")
