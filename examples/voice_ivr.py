"""
Voice IVR Example

Answers inbound calls with a digit menu, then routes the caller based on
the collected digits. Wire ``handle_voice`` to the POST route registered
as the number's voice callback and return its result as an
``application/xml`` body.
"""

from at_connect import (
    ActionBuilder,
    DialAction,
    EnqueueAttributes,
    GetDigitsAction,
    SayAttributes,
    VoiceCallback,
)
from at_connect.voice import VOICE_CONTENT_TYPE

SUPPORT_LINE = "+254711XXXYYY"
HOLD_MUSIC = "https://example.com/hold.mp3"


def handle_voice(form: dict) -> str:
    """Answer one voice callback."""
    callback = VoiceCallback.model_validate(form)

    if not callback.active:
        # final notification, body is ignored
        return ActionBuilder().build()

    if callback.dtmf_digits is None:
        menu = (
            GetDigitsAction()
            .say("Press 1 to talk to support or 2 to wait in the queue.")
            .num_digits(1)
            .timeout(10)
            .finish_on_key("#")
        )
        return (
            ActionBuilder()
            .say("Welcome to Example Ltd.", SayAttributes(voice="woman"))
            .get_digits(menu)
            .build()
        )

    if callback.dtmf_digits == "1":
        return (
            ActionBuilder()
            .say("Connecting you now.")
            .dial(DialAction(SUPPORT_LINE).record().max_duration(600))
            .build()
        )

    if callback.dtmf_digits == "2":
        return (
            ActionBuilder()
            .enqueue(EnqueueAttributes(hold_music=HOLD_MUSIC, name="support"))
            .build()
        )

    return ActionBuilder().say("Sorry, that option is not available.").reject().build()


if __name__ == "__main__":
    call = {
        "isActive": "1",
        "sessionId": "ATVId_demo",
        "direction": "Inbound",
        "callerNumber": "+254722XXXYYY",
        "destinationNumber": "+254700XXXYYY",
    }
    print(f"Content-Type: {VOICE_CONTENT_TYPE}")
    print(handle_voice(call))
    print(handle_voice({**call, "dtmfDigits": "1"}))
