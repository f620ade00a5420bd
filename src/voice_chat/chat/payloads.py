"""Helpers for building Chat Completions payloads and parsing their output."""

from __future__ import annotations

import base64
from typing import Any, Iterator, Optional, Sequence

from .history import AudioPart, Role, TextPart, Turn
from .models import CompletionMessage, ContentItem, ExecutionSettings

_AUDIO_CONTENT_TYPES = {"audio", "output_audio", "input_audio"}
_TEXT_CONTENT_TYPES = {"text", "output_text"}


def build_chat_request(
    model: str,
    history: Sequence[Turn],
    settings: ExecutionSettings,
) -> dict[str, Any]:
    """Return keyword arguments for ``chat.completions.create``."""

    messages: list[dict[str, Any]] = []
    if settings.system_instruction:
        messages.append({"role": "system", "content": settings.system_instruction})
    messages.extend(_turn_to_message(turn) for turn in history)

    request: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": settings.temperature,
        "top_p": settings.top_p,
        "max_completion_tokens": settings.max_tokens,
    }
    if settings.audio is not None:
        request["modalities"] = ["text", "audio"]
        request["audio"] = {"voice": settings.audio.voice, "format": settings.audio.format}
    return request


def _turn_to_message(turn: Turn) -> dict[str, Any]:
    if isinstance(turn.content, str):
        return {"role": turn.role.value, "content": turn.content}

    # Only user turns carry parts; assistant audio is never replayed as input.
    if turn.role is not Role.USER:
        return {"role": turn.role.value, "content": turn.text}

    parts: list[dict[str, Any]] = []
    for part in turn.content:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        elif isinstance(part, AudioPart):
            parts.append(
                {
                    "type": "input_audio",
                    "input_audio": {
                        "data": base64.b64encode(part.data).decode("ascii"),
                        "format": part.format,
                    },
                }
            )
    return {"role": turn.role.value, "content": parts}


def parse_chat_completion(response, audio_format: Optional[str] = None) -> CompletionMessage:
    """Pull text and content items out of a Chat Completions payload."""

    payload = _normalize_response_payload(response)
    message = _first_choice_message(payload)
    if message is None:
        return CompletionMessage()

    items = list(_iter_content_items(message.get("content"), audio_format))
    audio_item, transcript = _decode_message_audio(message.get("audio"), audio_format)
    if audio_item is not None:
        items.append(audio_item)

    text_fragments = [item.text for item in items if item.text]
    text = "\n".join(text_fragments).strip() or (transcript or "").strip() or None
    return CompletionMessage(text=text, items=tuple(items))


def _normalize_response_payload(response) -> object:
    if hasattr(response, "model_dump"):
        return response.model_dump()
    return response


def _first_choice_message(payload: object) -> Optional[dict]:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    return message if isinstance(message, dict) else None


def _iter_content_items(content: object, audio_format: Optional[str]) -> Iterator[ContentItem]:
    if isinstance(content, str):
        if content.strip():
            yield ContentItem.text_item(content.strip())
        return
    if not isinstance(content, list):
        return
    for part in content:
        if not isinstance(part, dict):
            continue
        part_type = part.get("type")
        if part_type in _TEXT_CONTENT_TYPES:
            text = (part.get("text") or "").strip()
            if text:
                yield ContentItem.text_item(text)
        elif part_type in _AUDIO_CONTENT_TYPES:
            audio_blob = part.get(part_type) or part.get("audio")
            item, _ = _decode_message_audio(audio_blob, audio_format)
            if item is not None:
                yield item
        else:
            yield ContentItem.other_item(str(part_type) if part_type else None)


def _decode_message_audio(
    audio_blob: object, audio_format: Optional[str]
) -> tuple[Optional[ContentItem], Optional[str]]:
    if not isinstance(audio_blob, dict):
        return None, None
    transcript = audio_blob.get("transcript")
    b64_data = audio_blob.get("data")
    if not b64_data:
        return None, transcript
    try:
        decoded = base64.b64decode(b64_data)
    except (ValueError, TypeError):
        return None, transcript
    if not decoded:
        return None, transcript
    fmt = audio_blob.get("format") or audio_format or "wav"
    return ContentItem.audio_item(decoded, f"audio/{fmt}"), transcript


__all__ = ["build_chat_request", "parse_chat_completion"]
