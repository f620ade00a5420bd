import pytest

from voice_chat.cli.commands import ConsoleCommand, parse_command


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("exit", ConsoleCommand.EXIT),
        ("QUIT", ConsoleCommand.EXIT),
        ("  Exit  ", ConsoleCommand.EXIT),
        ("clear", ConsoleCommand.CLEAR),
        ("Clear", ConsoleCommand.CLEAR),
    ],
)
def test_parse_command_recognizes_tokens(text, expected):
    assert parse_command(text) is expected


@pytest.mark.parametrize("text", ["", "hello", "exit now", "clear history", None])
def test_parse_command_ignores_regular_messages(text):
    assert parse_command(text) is None
