"""Analytic single-cycle waveform synthesis.

Every shape is evaluated in IEEE-754 double precision over the phase
``t = i / N`` for sample index ``i`` in a frame of ``N`` samples, so one
full cycle spans the frame:

=========  =======================================  ==========================
shape      formula                                  value at t = 0
=========  =======================================  ==========================
none       0                                        0
sine       sin(2*pi*t)                              0
square     sign(sin(2*pi*t)), with sign(0) = 0      0
sawtooth   2 * (t - floor(0.5 + t))                 0
triangle   1 - 4 * |round(t) - t|                   1
=========  =======================================  ==========================

``round`` is round-half-up (``floor(x + 0.5)``). The ``custom`` shape stands
for externally supplied data and is rejected.
"""

from functools import lru_cache

import numpy as np
from numpy import pi

from wtforge.errors import CustomShapeError, UnknownShapeError
from wtforge.types import WaveformData, WaveShape
from wtforge.utils import assert_exhaustiveness


class WaveGenerator:
    def generate(self, shape: WaveShape, samples_per_frame: int) -> WaveformData:
        if samples_per_frame < 1:
            raise ValueError(f"samples_per_frame must be positive, got {samples_per_frame}")

        match shape:
            case WaveShape.none:
                return self.none(samples_per_frame)
            case WaveShape.sine:
                return self.sine(samples_per_frame)
            case WaveShape.square:
                return self.square(samples_per_frame)
            case WaveShape.sawtooth:
                return self.sawtooth(samples_per_frame)
            case WaveShape.triangle:
                return self.triangle(samples_per_frame)
            case WaveShape.custom:
                raise CustomShapeError()
            case _:
                assert_exhaustiveness(shape)

    @staticmethod
    def _phase(samples_per_frame: int) -> WaveformData:
        return np.arange(samples_per_frame, dtype=np.float64) / samples_per_frame

    def none(self, samples_per_frame: int) -> WaveformData:
        return np.zeros(samples_per_frame, dtype=np.float64)

    def sine(self, samples_per_frame: int) -> WaveformData:
        t = self._phase(samples_per_frame)
        return np.sin(2 * pi * t)

    def square(self, samples_per_frame: int) -> WaveformData:
        """Sign of the sine cycle.

        Only sample 0 lands exactly on a zero crossing and yields 0. At
        ``t = 0.5`` the computed sine is a tiny positive value, so that
        sample is +1.
        """
        return np.sign(self.sine(samples_per_frame))

    def sawtooth(self, samples_per_frame: int) -> WaveformData:
        t = self._phase(samples_per_frame)
        return 2 * (t - np.floor(0.5 + t))

    def triangle(self, samples_per_frame: int) -> WaveformData:
        t = self._phase(samples_per_frame)
        return 1 - 4 * np.abs(np.floor(t + 0.5) - t)


@lru_cache(maxsize=128)
def _cached_waveform(shape: WaveShape, samples_per_frame: int) -> WaveformData:
    wave = WaveGenerator().generate(shape, samples_per_frame)
    wave.flags.writeable = False
    return wave


def generate_waveform(shape: WaveShape | str, samples_per_frame: int) -> WaveformData:
    """Generate one cycle of ``shape`` with ``samples_per_frame`` samples.

    Results are memoized and returned read-only; copy before modifying.

    Raises:
        CustomShapeError: If ``shape`` is ``custom``.
        UnknownShapeError: If ``shape`` is a string naming no known shape.
    """
    return _cached_waveform(parse_shape(shape), samples_per_frame)


def parse_shape(value: WaveShape | str) -> WaveShape:
    """Resolve a shape name (case-insensitive) or label to a ``WaveShape``."""
    if isinstance(value, WaveShape):
        return value

    key = value.strip().lower()
    for shape in WaveShape:
        if key in (shape.value, shape.label.lower()):
            return shape
    raise UnknownShapeError(value)
