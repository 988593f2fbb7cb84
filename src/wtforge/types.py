from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

WaveformData: TypeAlias = NDArray[np.float64]
WavetableData: TypeAlias = NDArray[np.float64]

VALID_IMPORT_FRAME_SIZES: tuple[int, ...] = (256, 512, 1024, 2048, 4096)

BLOFELD_NUM_WAVES = 64
BLOFELD_SAMPLES_PER_WAVE = 128
BLOFELD_SLOT_RANGE = range(80, 119)
BLOFELD_NAME_LENGTH = 14


class WaveShape(str, Enum):
    none = "none"
    sine = "sine"
    square = "square"
    sawtooth = "sawtooth"
    triangle = "triangle"
    custom = "custom"

    @property
    def label(self) -> str:
        """Short display label for this shape."""
        labels = {
            WaveShape.none: "None",
            WaveShape.sine: "Sin",
            WaveShape.square: "Sqr",
            WaveShape.sawtooth: "Saw",
            WaveShape.triangle: "Tri",
            WaveShape.custom: "Custom",
        }
        return labels[self]

    @property
    def synthesizable(self) -> bool:
        """Whether the shape has an analytic synthesis rule."""
        return self is not WaveShape.custom


@dataclass(frozen=True)
class Keyframe:
    """A waveform pinned to a frame index of the wavetable."""

    frame: int
    data: WaveformData


@dataclass(frozen=True)
class WavetableWithMetadata:
    """A built wavetable plus the metadata consumers use to display it.

    ``keyframes`` holds the sorted, unique frame indices that were authored
    rather than interpolated. The builders record it but never read it back.
    """

    data: WavetableData
    keyframes: tuple[int, ...]
    name: str | None = None
    preset_number: int | None = None

    @property
    def number_frames(self) -> int:
        return int(self.data.shape[0])

    @property
    def samples_per_frame(self) -> int:
        return int(self.data.shape[1])

    def is_keyframe(self, frame: int) -> bool:
        return frame in self.keyframes


@dataclass
class BuildParams:
    number_frames: int = 64
    samples_per_frame: int = 256
    name: str | None = None
    preset_number: int | None = None


@dataclass
class ExportParams:
    syx: Path | None = None
    slot: int = 80
    name: str | None = None
    wav_sample_rate: int = 44100
    wav_subtype: str = "FLOAT"
