import pytest

from at_connect.exceptions import ValidationError
from at_connect.voice import (
    XML_DECLARATION,
    ActionBuilder,
    DialAction,
    EnqueueAttributes,
    GetDigitsAction,
    RecordAction,
    SayAttributes,
    VoiceCallback,
)


def _document(body: str) -> str:
    return XML_DECLARATION + body


def test_empty_builder_renders_empty_response():
    assert ActionBuilder().build() == _document("<Response />")


def test_say_renders_text():
    xml = ActionBuilder().say("Hello").build()
    assert xml == _document("<Response><Say>Hello</Say></Response>")


def test_say_attributes():
    xml = ActionBuilder().say("Hi", SayAttributes(voice="woman", play_beep=True)).build()
    assert xml == _document('<Response><Say voice="woman" playBeep="true">Hi</Say></Response>')


def test_actions_render_in_call_order():
    xml = (
        ActionBuilder()
        .say("One")
        .play("https://example.com/two.mp3")
        .say("Three")
        .build()
    )
    assert xml == _document(
        "<Response><Say>One</Say>"
        '<Play url="https://example.com/two.mp3" />'
        "<Say>Three</Say></Response>"
    )


def test_get_digits_attribute_order_is_fixed():
    action = (
        GetDigitsAction()
        .callback_url("https://example.com/digits")
        .timeout(30)
        .finish_on_key("#")
        .num_digits(4)
        .say("Enter your PIN")
    )
    xml = ActionBuilder().get_digits(action).build()
    assert xml == _document(
        '<Response><GetDigits numDigits="4" finishOnKey="#" timeout="30" '
        'callbackUrl="https://example.com/digits"><Say>Enter your PIN</Say>'
        "</GetDigits></Response>"
    )


def test_get_digits_last_prompt_wins():
    action = GetDigitsAction().say("ignored").play("https://example.com/menu.wav")
    xml = ActionBuilder().get_digits(action).build()
    assert xml == _document(
        '<Response><GetDigits><Play url="https://example.com/menu.wav" /></GetDigits></Response>'
    )


def test_dial_renders_all_attributes():
    action = (
        DialAction(["+254711000111", "+254722000222"])
        .record()
        .sequential()
        .caller_id("+254700000000")
        .max_duration(60)
        .ring_back_tone("https://example.com/ring.mp3")
    )
    xml = ActionBuilder().dial(action).build()
    assert xml == _document(
        '<Response><Dial phoneNumbers="+254711000111,+254722000222" '
        'callerId="+254700000000" record="true" sequential="true" '
        'maxDuration="60" ringBackTone="https://example.com/ring.mp3" /></Response>'
    )


def test_dial_false_flags_render_explicitly():
    xml = ActionBuilder().dial(DialAction("+254711000111").record(False)).build()
    assert '<Dial phoneNumbers="+254711000111" record="false" />' in xml


def test_record_with_prompt():
    action = (
        RecordAction()
        .play("https://example.com/beep.wav")
        .finish_on_key("#")
        .max_length(10)
        .play_beep()
        .trim_silence(False)
    )
    xml = ActionBuilder().record(action).build()
    assert xml == _document(
        '<Response><Record finishOnKey="#" maxLength="10" playBeep="true" '
        'trimSilence="false"><Play url="https://example.com/beep.wav" /></Record></Response>'
    )


def test_queue_and_call_control_actions():
    xml = (
        ActionBuilder()
        .enqueue()
        .enqueue(EnqueueAttributes(hold_music="https://example.com/hold.mp3", name="support"))
        .dequeue("+254711000111", name="support")
        .conference()
        .redirect("https://example.com/next")
        .reject()
        .build()
    )
    assert xml == _document(
        "<Response><Enqueue />"
        '<Enqueue holdMusic="https://example.com/hold.mp3" name="support" />'
        '<Dequeue phoneNumber="+254711000111" name="support" />'
        "<Conference />"
        "<Redirect>https://example.com/next</Redirect>"
        "<Reject /></Response>"
    )


def test_actions_after_reject_are_kept():
    builder = ActionBuilder().reject().say("Still here")
    assert len(builder) == 2
    assert builder.build().endswith("<Reject /><Say>Still here</Say></Response>")


def test_text_and_attributes_are_escaped():
    xml = (
        ActionBuilder()
        .say("Tom & Jerry <3")
        .play('https://example.com/a?x=1&y="2"')
        .build()
    )
    assert "<Say>Tom &amp; Jerry &lt;3</Say>" in xml
    assert '<Play url="https://example.com/a?x=1&amp;y=&quot;2&quot;" />' in xml


def test_build_is_repeatable():
    builder = ActionBuilder().say("Hello")
    first = builder.build()
    assert builder.build() == first

    builder.reject()
    assert builder.build() == _document("<Response><Say>Hello</Say><Reject /></Response>")


@pytest.mark.parametrize(
    "make",
    [
        lambda: GetDigitsAction().num_digits(0),
        lambda: GetDigitsAction().num_digits(True),
        lambda: GetDigitsAction().finish_on_key("##"),
        lambda: GetDigitsAction().timeout(-5),
        lambda: RecordAction().finish_on_key("x"),
        lambda: RecordAction().max_length(0),
        lambda: DialAction([]),
        lambda: DialAction(["+254711000111", ""]),
        lambda: ActionBuilder().play(""),
        lambda: ActionBuilder().redirect(" "),
        lambda: ActionBuilder().dequeue(""),
        lambda: ActionBuilder().say(None),
    ],
)
def test_invalid_arguments_raise(make):
    with pytest.raises(ValidationError):
        make()


def test_voice_callback_optional_fields():
    callback = VoiceCallback.model_validate(
        {
            "isActive": "1",
            "sessionId": "ATVId_1",
            "direction": "Inbound",
            "callerNumber": "+254711000111",
            "destinationNumber": "+254700000000",
        }
    )
    assert callback.active
    assert callback.is_inbound
    assert callback.dtmf_digits is None
    assert callback.recording_url is None


def test_voice_callback_keeps_empty_digits():
    callback = VoiceCallback.model_validate(
        {
            "isActive": "0",
            "sessionId": "ATVId_1",
            "direction": "Outbound",
            "callerNumber": "+254700000000",
            "destinationNumber": "+254711000111",
            "dtmfDigits": "",
        }
    )
    assert not callback.active
    assert callback.dtmf_digits == ""


def test_appended_sub_builder_is_snapshotted():
    prompt = GetDigitsAction().say("Press 1").num_digits(1)
    english = ActionBuilder().get_digits(prompt)
    before = english.build()

    prompt.say("Bonyeza 1")
    swahili = ActionBuilder().get_digits(prompt)

    assert english.build() == before
    assert "<Say>Bonyeza 1</Say>" in swahili.build()


def test_dial_reused_across_documents_stays_independent():
    dial = DialAction("+254711000111")
    first = ActionBuilder().dial(dial)
    dial.record()

    assert "record" not in first.build()
    assert 'record="true"' in ActionBuilder().dial(dial).build()


def test_actions_view_cannot_change_document():
    builder = ActionBuilder().dial(DialAction("+254711000111"))
    before = builder.build()

    builder.actions[0].phone_numbers.append("+254722000222")
    builder.actions[0].record()

    assert builder.build() == before
