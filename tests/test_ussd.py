import pytest

from at_connect.exceptions import ValidationError
from at_connect.ussd import (
    UssdMenu,
    UssdNotification,
    UssdResponse,
    UssdSessionRequest,
    UssdSessionStatus,
)


def _request(text: str) -> UssdSessionRequest:
    return UssdSessionRequest.model_validate(
        {
            "sessionId": "ATUid_1",
            "serviceCode": "*384*123#",
            "phoneNumber": "+254711000111",
            "text": text,
            "networkCode": "63902",
        }
    )


def test_first_turn_has_no_input():
    request = _request("")
    assert request.is_initial()
    assert request.depth() == 0
    assert request.current_input() is None
    assert request.navigation_path() == []


def test_navigation_path_follows_trail():
    request = _request("1*2*3")
    assert not request.is_initial()
    assert request.navigation_path() == ["1", "2", "3"]
    assert request.depth() == 3
    assert request.current_input() == "3"


def test_empty_token_counts_toward_depth():
    request = _request("1*")
    assert request.navigation_path() == ["1", ""]
    assert request.depth() == 2
    assert request.current_input() == ""


def test_missing_text_defaults_to_initial():
    request = UssdSessionRequest(
        session_id="s", service_code="*1#", phone_number="+254711000111", network_code="63902"
    )
    assert request.is_initial()


def test_matches_path_is_exact():
    request = _request("1*2")
    assert request.matches_path("1*2")
    assert not request.matches_path("1")
    assert not _request("1*20").matches_path("1*2")
    assert not _request("1*2*3").matches_path("1*2")


def test_starts_with_path_is_raw_prefix():
    assert _request("1*2*3").starts_with_path("1*2")
    assert _request("1*20").starts_with_path("1*2")
    assert not _request("2*1").starts_with_path("1")


def test_request_resolves_network():
    assert _request("").network.name == "Safaricom Kenya"


def test_continue_and_end_rendering():
    assert UssdResponse.continues("Pick one").to_string() == "CON Pick one"
    assert str(UssdResponse.ends("Bye")) == "END Bye"
    assert UssdResponse.continues("x").is_continuing
    assert UssdResponse.ends("x").is_ending


def test_empty_message_keeps_prefix():
    assert UssdResponse.ends("").to_string() == "END "


def test_message_body_is_verbatim():
    message = "Line 1\nLine 2 * # café"
    assert UssdResponse.continues(message).to_string() == "CON " + message
    assert UssdResponse.ends(message).to_bytes() == ("END " + message).encode("utf-8")


@pytest.mark.parametrize("message", ["CON hi", "END hi"])
def test_prefixed_message_is_rejected(message):
    with pytest.raises(ValidationError):
        UssdResponse.continues(message)


def test_menu_renders_options_in_order():
    response = (
        UssdMenu("Welcome")
        .add_option("1", "My account")
        .add_option(2, "My phone number")
        .build_continue()
    )
    assert response.to_string() == "CON Welcome\n1. My account\n2. My phone number"


def test_menu_without_options_renders_header():
    assert UssdMenu("Thanks").build_end().to_string() == "END Thanks"


def test_menu_add_options_from_mapping():
    menu = UssdMenu("Pick:").add_options({"1": "A", "2": "B"})
    assert len(menu) == 2
    assert menu.render() == "Pick:\n1. A\n2. B"


def test_notification_parsing():
    notification = UssdNotification.model_validate(
        {
            "date": "2025-01-15 10:12:00",
            "sessionId": "ATUid_1",
            "serviceCode": "*384*123#",
            "networkCode": "63902",
            "phoneNumber": "+254711000111",
            "status": "Success",
            "cost": "KES 0.0500",
            "durationInMillis": "3500",
            "hopsCount": "3",
            "input": "1*2",
            "lastAppResponse": "END Bye",
        }
    )
    assert notification.status is UssdSessionStatus.SUCCESS
    assert notification.is_successful
    assert notification.duration_in_millis == 3500
    assert notification.hops_count == 3
    assert notification.error_message is None
