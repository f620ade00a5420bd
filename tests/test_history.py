from voice_chat.chat.history import AudioPart, ConversationHistory, Role, TextPart, Turn


def test_user_turn_without_audio_is_plain_text():
    turn = Turn.user("hello")

    assert turn.role is Role.USER
    assert turn.content == "hello"
    assert turn.is_multimodal is False
    assert turn.audio_parts == ()


def test_user_turn_with_audio_keeps_text_then_audio():
    audio = AudioPart(b"RIFF....", "audio/wav")
    turn = Turn.user("what is the weather", audio)

    assert turn.is_multimodal is True
    assert turn.content == (TextPart("what is the weather"), audio)
    assert turn.text == "what is the weather"
    assert turn.audio_parts == (audio,)


def test_turn_converts_list_content_to_tuple():
    turn = Turn(Role.USER, [TextPart("a"), TextPart("b")])

    assert isinstance(turn.content, tuple)
    assert turn.text == "a b"


def test_audio_part_format_uses_mime_subtype():
    assert AudioPart(b"x", "audio/mp3").format == "mp3"
    assert AudioPart(b"x", "wav").format == "wav"


def test_history_preserves_order_and_snapshot_is_immutable():
    history = ConversationHistory()
    history.append(Turn.user("hello"))
    history.append(Turn.assistant("hi there"))

    snapshot = history.snapshot()
    history.append(Turn.user("again"))

    assert [turn.role for turn in snapshot] == [Role.USER, Role.ASSISTANT]
    assert len(history) == 3  # noqa: PLR2004
    assert history.last() == Turn.user("again")
    assert [turn.text for turn in history] == ["hello", "hi there", "again"]


def test_history_clear_empties_everything():
    history = ConversationHistory()
    history.append(Turn.user("hello"))

    history.clear()

    assert len(history) == 0
    assert history.last() is None
    assert history.snapshot() == ()
