import io
import wave
from collections import UserDict

import numpy as np
import pytest

from voice_chat.audio.resampler import LinearResampler
from voice_chat.audio.utils import device_info_dict, pcm16_to_wav_bytes


def test_device_info_dict_from_plain_dict():
    data = {"name": "loopback", "index": 2}
    result = device_info_dict(data)
    assert result == data
    assert result is not data  # returns a copy


def test_device_info_dict_from_mapping():
    data = UserDict({"name": "usb mic", "index": 1})
    result = device_info_dict(data)
    assert result == {"name": "usb mic", "index": 1}


def test_device_info_dict_unknown_type_returns_empty():
    class SlotsOnly:
        __slots__ = ("name",)

        def __init__(self):
            self.name = "slots"

    assert device_info_dict(SlotsOnly()) == {}


def test_pcm16_to_wav_bytes_writes_header_and_frames():
    pcm = np.arange(10, dtype=np.int16).tobytes()

    wav_bytes = pcm16_to_wav_bytes(pcm, 24000, channels=1)

    with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
        assert wav_file.getframerate() == 24000  # noqa: PLR2004
        assert wav_file.getnframes() == 10  # noqa: PLR2004
        assert wav_file.readframes(10) == pcm


def test_resampler_upsamples_mono():
    resampler = LinearResampler(16000, 48000)
    samples = np.linspace(-1.0, 1.0, 100, dtype=np.float32)

    output = resampler.process(samples)

    assert output.dtype == np.float32
    assert output.shape == (300,)
    assert output[0] == pytest.approx(-1.0)
    assert output[-1] == pytest.approx(1.0)


def test_resampler_keeps_channel_layout():
    resampler = LinearResampler(48000, 24000)
    samples = np.stack(
        [np.zeros(96, dtype=np.float32), np.ones(96, dtype=np.float32)], axis=1
    )

    output = resampler.process(samples)

    assert output.shape == (48, 2)
    np.testing.assert_allclose(output[:, 1], 1.0)


def test_resampler_returns_copy_when_rates_match():
    samples = np.ones(4, dtype=np.float32)

    output = LinearResampler(16000, 16000).process(samples)

    np.testing.assert_array_equal(output, samples)
    assert output is not samples


def test_resampler_rejects_invalid_rates():
    with pytest.raises(ValueError):
        LinearResampler(0, 16000)
