import base64

from voice_chat.chat.history import AudioPart, Turn
from voice_chat.chat.models import AudioOutputOptions, ContentKind, ExecutionSettings
from voice_chat.chat.payloads import build_chat_request, parse_chat_completion


def _settings(audio: AudioOutputOptions | None = None) -> ExecutionSettings:
    return ExecutionSettings(
        temperature=0.7,
        top_p=0.95,
        max_tokens=800,
        system_instruction="Be concise.",
        audio=audio,
    )


class FakeResponse:
    def __init__(self, payload: dict):
        self._payload = payload

    def model_dump(self) -> dict:
        return self._payload


def _completion(message: dict) -> FakeResponse:
    return FakeResponse({"choices": [{"index": 0, "message": message}]})


def test_build_chat_request_text_only():
    history = [Turn.user("Hello"), Turn.assistant("Hi there!")]

    request = build_chat_request("gpt-4o-audio-preview", history, _settings())

    assert request["model"] == "gpt-4o-audio-preview"
    assert request["messages"] == [
        {"role": "system", "content": "Be concise."},
        {"role": "user", "content": "Hello"},
        {"role": "assistant", "content": "Hi there!"},
    ]
    assert request["temperature"] == 0.7  # noqa: PLR2004
    assert request["top_p"] == 0.95  # noqa: PLR2004
    assert request["max_completion_tokens"] == 800  # noqa: PLR2004
    assert "modalities" not in request
    assert "audio" not in request


def test_build_chat_request_with_audio_input_and_output():
    wav = b"RIFFdata"
    history = [Turn.user("what time is it", AudioPart(wav, "audio/wav"))]

    request = build_chat_request(
        "gpt-4o-audio-preview",
        history,
        _settings(AudioOutputOptions(voice="alloy", format="wav")),
    )

    user_message = request["messages"][1]
    assert user_message["role"] == "user"
    assert user_message["content"][0] == {"type": "text", "text": "what time is it"}
    audio_part = user_message["content"][1]
    assert audio_part["type"] == "input_audio"
    assert base64.b64decode(audio_part["input_audio"]["data"]) == wav
    assert audio_part["input_audio"]["format"] == "wav"
    assert request["modalities"] == ["text", "audio"]
    assert request["audio"] == {"voice": "alloy", "format": "wav"}


def test_build_chat_request_skips_blank_system_prompt():
    settings = ExecutionSettings(
        temperature=0.7, top_p=0.95, max_tokens=800, system_instruction=""
    )

    request = build_chat_request("model", [Turn.user("hi")], settings)

    assert request["messages"] == [{"role": "user", "content": "hi"}]


def test_parse_chat_completion_reads_string_content():
    message = parse_chat_completion(_completion({"role": "assistant", "content": " Hi there! "}))

    assert message.text == "Hi there!"
    assert [item.kind for item in message.items] == [ContentKind.TEXT]


def test_parse_chat_completion_decodes_audio_and_uses_transcript():
    audio_bytes = b"\x00\x01\x02\x03"
    response = _completion(
        {
            "role": "assistant",
            "content": None,
            "audio": {
                "id": "audio_1",
                "data": base64.b64encode(audio_bytes).decode("ascii"),
                "transcript": "Here is a joke.",
            },
        }
    )

    message = parse_chat_completion(response, audio_format="mp3")

    assert message.text == "Here is a joke."
    assert len(message.items) == 1
    item = message.items[0]
    assert item.kind is ContentKind.AUDIO
    assert item.data == audio_bytes
    assert item.mime_type == "audio/mp3"


def test_parse_chat_completion_handles_content_parts():
    response = {
        "choices": [
            {
                "message": {
                    "content": [
                        {"type": "text", "text": "first"},
                        {"type": "refusal", "refusal": "nope"},
                        {"type": "output_text", "text": "second"},
                    ]
                }
            }
        ]
    }

    message = parse_chat_completion(response)

    assert message.text == "first\nsecond"
    assert [item.kind for item in message.items] == [
        ContentKind.TEXT,
        ContentKind.OTHER,
        ContentKind.TEXT,
    ]


def test_parse_chat_completion_tolerates_missing_choices():
    assert parse_chat_completion({"choices": []}).text is None
    assert parse_chat_completion(None).items == ()


def test_parse_chat_completion_ignores_undecodable_audio():
    response = _completion({"content": "text", "audio": {"data": "***", "transcript": "t"}})

    message = parse_chat_completion(response)

    assert message.text == "text"
    assert all(item.kind is ContentKind.TEXT for item in message.items)
