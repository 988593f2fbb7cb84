"""WAV wavetable import.

Decodes a WAV file (Serum/Vital style concatenated single-cycle frames, or
any mono/stereo recording) with ``soundfile`` and hands the first channel to
``import_from_samples``. Decoding is the only file I/O in the import path and
either fully succeeds or raises.
"""

from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf
from numpy.typing import NDArray

from wtforge.importers.samples import import_from_samples
from wtforge.types import VALID_IMPORT_FRAME_SIZES, WavetableWithMetadata


def read_mono_samples(path: Path | str) -> tuple[NDArray[np.float32], int]:
    """Decode a WAV file and return its first channel and sample rate."""
    data, sample_rate = sf.read(Path(path), dtype="float32")

    # Handle stereo by taking first channel
    if data.ndim > 1:
        data = data[:, 0]

    return data, int(sample_rate)


def import_wav(
    path: Path | str,
    number_frames: int = 64,
    samples_per_frame: int | None = None,
) -> WavetableWithMetadata:
    """Import a WAV file as a wavetable.

    The name and preset number are parsed from the file name, e.g.
    ``Organ_12.wav`` yields ``("Organ", 12)``.

    Args:
        path: Path to the WAV file.
        number_frames: Number of frames to slice.
        samples_per_frame: Samples per frame (derived from the file length if None).

    Returns:
        Wavetable with every frame marked as a keyframe.

    Raises:
        soundfile.LibsndfileError: If the file cannot be decoded.
        WavetableError: If the audio does not slice into a valid wavetable.
    """
    path = Path(path)
    samples, _ = read_mono_samples(path)
    return import_from_samples(samples, number_frames, samples_per_frame, filename=path.name)


def detect_wav_wavetable(
    path: Path | str,
    possible_num_frames: list[int] | None = None,
) -> dict[str, Any]:
    """Analyze a WAV file and suggest frame counts that would import cleanly.

    A suggestion is a frame count that divides the file exactly into one of
    the accepted frame sizes.

    Example:
        >>> info = detect_wav_wavetable("unknown.wav")  # doctest: +SKIP
        >>> for suggestion in info["suggestions"]:  # doctest: +SKIP
        ...     print(f"{suggestion['number_frames']} x {suggestion['samples_per_frame']}")
    """
    path = Path(path)
    info = sf.info(path)
    samples, sample_rate = read_mono_samples(path)
    total_samples = len(samples)

    if possible_num_frames is None:
        possible_num_frames = [1, 2, 4, 8, 16, 32, 64, 128, 256]

    suggestions = []
    for number_frames in possible_num_frames:
        if total_samples % number_frames != 0:
            continue
        samples_per_frame = total_samples // number_frames
        if samples_per_frame in VALID_IMPORT_FRAME_SIZES:
            suggestions.append(
                {"number_frames": number_frames, "samples_per_frame": samples_per_frame}
            )

    # Prefer the common 64-frame layout, then more frames
    suggestions.sort(key=lambda s: (s["number_frames"] != 64, -s["number_frames"]))

    return {
        "file_info": {
            "path": str(path),
            "total_samples": total_samples,
            "sample_rate": sample_rate,
            "channels": info.channels,
            "duration_seconds": info.duration,
        },
        "suggestions": suggestions,
        "recommended": suggestions[0] if suggestions else None,
    }
