"""
USSD Menu Example

A two-level USSD menu driven by the navigation trail. Wire ``handle_ussd``
to the POST route registered as the application's USSD callback and
return its result as a ``text/plain`` body.
"""

from at_connect import UssdMenu, UssdResponse, UssdSessionRequest
from at_connect.ussd import USSD_CONTENT_TYPE


def handle_ussd(form: dict) -> str:
    """Answer one USSD turn."""
    request = UssdSessionRequest.model_validate(form)

    if request.is_initial():
        menu = (
            UssdMenu("What would you want to check")
            .add_option("1", "My account")
            .add_option("2", "My phone number")
        )
        return str(menu.build_continue())

    if request.matches_path("1"):
        menu = (
            UssdMenu("Choose account information you want to view")
            .add_option("1", "Account number")
            .add_option("2", "Account balance")
        )
        return str(menu.build_continue())

    if request.matches_path("2"):
        return str(UssdResponse.ends(f"Your phone number is {request.phone_number}"))

    if request.matches_path("1*1"):
        return str(UssdResponse.ends("Your account number is ACC1001"))

    if request.matches_path("1*2"):
        return str(UssdResponse.ends("Your balance is KES 10,000"))

    return str(UssdResponse.ends("Invalid choice"))


if __name__ == "__main__":
    session = {
        "sessionId": "ATUid_demo",
        "serviceCode": "*384*123#",
        "phoneNumber": "+254711XXXYYY",
        "networkCode": "63902",
    }
    for trail in ["", "1", "1*2"]:
        print(f"text={trail!r} ({USSD_CONTENT_TYPE})")
        print(handle_ussd({**session, "text": trail}))
        print()
