"""
Helper routines for validating audio hardware outside the chat loop.
"""

import asyncio

from voice_chat.audio import AudioCapture, AudioPlayer
from voice_chat.audio.playback import write_response_audio
from voice_chat.config import CHANNELS, SAMPLE_RATE
from voice_chat.core.results import Err


async def test_audio_capture(seconds: float = 5.0, *, play_back: bool = True) -> bool:
    """Record a short clip to verify the microphone, then optionally play it back."""
    print("\n=== Audio Capture Test ===\n")

    capture = AudioCapture()
    probe = capture.probe()
    if isinstance(probe, Err):
        print(f"Microphone unavailable: {probe.error.message}")
        return False

    print(f"Capturing audio for {seconds:g} seconds...")
    print("(Speak into your microphone or make some noise)\n")
    result = await capture.record(seconds)
    if isinstance(result, Err):
        print(f"Capture failed: {result.error.message}")
        return False

    buffer = result.value
    print("\n=== Test Complete ===")
    print(f"Total bytes: {len(buffer.pcm):,}")
    print(f"Duration: {buffer.duration_seconds:.2f}s")
    print(f"Audio format verified: {SAMPLE_RATE}Hz, {CHANNELS} channel(s), 16-bit PCM")

    if play_back and not buffer.is_empty:
        path = write_response_audio(buffer.to_wav(), "wav", basename="capture_test")
        print(f"\nPlaying back {path.name}...")
        error = await AudioPlayer().play(path)
        if error is not None:
            print(f"Playback failed: {error.message}")
            return False
    return not buffer.is_empty


if __name__ == "__main__":
    asyncio.run(test_audio_capture())
