"""Slicing decoded audio into a wavetable.

The audio itself is decoded elsewhere (see ``wtforge.importers.wav``); this
module only checks the sizing and cuts the sample stream into frames. Every
imported frame is authored data, so all of them are marked as keyframes.
"""

import re
from pathlib import PurePath

import numpy as np
from numpy.typing import ArrayLike

from wtforge.errors import (
    InsufficientSamplesError,
    NonIntegerFrameSizeError,
    UnsupportedFrameSizeError,
)
from wtforge.types import BLOFELD_NAME_LENGTH, VALID_IMPORT_FRAME_SIZES, WavetableWithMetadata
from wtforge.utils import is_printable_ascii

_PRESET_NUMBER = re.compile(r"[+-]?[0-9]+")


def import_from_samples(
    samples: ArrayLike,
    number_frames: int,
    samples_per_frame: int | None = None,
    filename: str | None = None,
) -> WavetableWithMetadata:
    """Slice mono samples into ``number_frames`` consecutive frames.

    Args:
        samples: Decoded mono audio samples.
        number_frames: Number of frames to cut.
        samples_per_frame: Samples per frame. When omitted it is derived as
            ``len(samples) / number_frames``, which must divide exactly.
        filename: Source filename, used to derive the name and preset number.

    Returns:
        A wavetable whose frames are all marked as keyframes. Samples past
        ``number_frames * samples_per_frame`` are ignored.

    Raises:
        ValueError: If ``number_frames`` is not positive.
        NonIntegerFrameSizeError: If the frame size cannot be derived exactly.
        InsufficientSamplesError: If there is not enough audio for the table.
        UnsupportedFrameSizeError: If the frame size is not an accepted size.
    """
    if number_frames < 1:
        raise ValueError(f"number_frames must be positive, got {number_frames}")

    audio = np.asarray(samples, dtype=np.float64).reshape(-1)
    total_samples = len(audio)

    if samples_per_frame is None:
        if total_samples % number_frames != 0:
            raise NonIntegerFrameSizeError(total_samples, number_frames)
        samples_per_frame = total_samples // number_frames

    required = number_frames * samples_per_frame
    if total_samples < required:
        raise InsufficientSamplesError(required, total_samples)

    if samples_per_frame not in VALID_IMPORT_FRAME_SIZES:
        raise UnsupportedFrameSizeError(samples_per_frame, VALID_IMPORT_FRAME_SIZES)

    # Reshape of a fresh slice copy so the table never aliases the caller's buffer
    data = audio[:required].copy().reshape(number_frames, samples_per_frame)

    name, preset_number = (None, None) if filename is None else parse_wavetable_name(filename)

    return WavetableWithMetadata(
        data=data,
        keyframes=tuple(range(number_frames)),
        name=name,
        preset_number=preset_number,
    )


def parse_wavetable_name(filename: str) -> tuple[str, int | None]:
    """Derive a display name and optional preset number from a filename.

    The extension is stripped and the rest split on ``_``. If there are at
    least two parts and the last is a decimal integer (optionally signed), it becomes the
    preset number and the remaining parts, re-joined with ``_``, the name.
    Otherwise the whole stripped filename is the name. Characters outside
    printable ASCII are dropped and the name is cut to 14 characters.

    >>> parse_wavetable_name("MyWave_7.wav")
    ('MyWave', 7)
    >>> parse_wavetable_name("MyWave.wav")
    ('MyWave', None)
    """
    stem = PurePath(filename).name
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]

    parts = stem.split("_")
    preset_number: int | None = None
    if len(parts) >= 2 and _PRESET_NUMBER.fullmatch(parts[-1]):
        preset_number = int(parts[-1])
        stem = "_".join(parts[:-1])

    name = "".join(c for c in stem if is_printable_ascii(c))
    return name[:BLOFELD_NAME_LENGTH], preset_number
