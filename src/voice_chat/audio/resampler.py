"""
Linear resampler for decoded float32 audio.
"""

from __future__ import annotations

import numpy as np


class LinearResampler:
    """Resamples float32 frames (mono or interleaved-by-column) between two rates."""

    def __init__(self, source_rate: int, target_rate: int):
        if source_rate <= 0 or target_rate <= 0:
            raise ValueError("Sample rates must be positive integers.")

        self.source_rate = source_rate
        self.target_rate = target_rate

    def process(self, samples: np.ndarray) -> np.ndarray:
        """Return ``samples`` resampled to the target rate, keeping the channel layout."""

        if samples.size == 0 or self.source_rate == self.target_rate:
            return samples.astype(np.float32, copy=True)

        source_frames = samples.shape[0]
        target_frames = max(1, int(round(source_frames * self.target_rate / self.source_rate)))
        source_positions = np.arange(source_frames, dtype=np.float64)
        target_positions = np.linspace(0, source_frames - 1, target_frames)

        if samples.ndim == 1:
            return np.interp(target_positions, source_positions, samples).astype(np.float32)

        channels = [
            np.interp(target_positions, source_positions, samples[:, index])
            for index in range(samples.shape[1])
        ]
        return np.stack(channels, axis=1).astype(np.float32)
