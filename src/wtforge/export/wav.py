from pathlib import Path

import numpy as np
import soundfile as sf
from numpy.typing import ArrayLike

from wtforge.types import WavetableWithMetadata

SUPPORTED_SUBTYPES = ("FLOAT", "PCM_16", "PCM_24")


def save_wavetable_wav(
    path: Path | str,
    wavetable: WavetableWithMetadata | ArrayLike,
    sample_rate: int = 44100,
    subtype: str = "FLOAT",
) -> Path:
    """
    Save a wavetable as one mono .wav file with all frames back to back.

    The file re-imports with ``import_wav(path, number_frames)``.

    Args:
        path: Destination .wav path
        wavetable: Table of shape (number_frames, samples_per_frame)
        sample_rate: Sample rate for the .wav file (default 44100 Hz)
        subtype: soundfile subtype, one of FLOAT, PCM_16 or PCM_24

    Returns:
        The path written
    """
    if subtype not in SUPPORTED_SUBTYPES:
        raise ValueError(f"Unsupported subtype: {subtype}. Use one of {SUPPORTED_SUBTYPES}.")

    data = wavetable.data if isinstance(wavetable, WavetableWithMetadata) else wavetable
    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 2:
        raise ValueError(f"Wavetable should be 2D (frames, samples), got shape {data.shape}")
    if not np.all(np.isfinite(data)):
        raise ValueError("Wavetable contains non-finite samples")

    # Integer formats cannot hold values past full scale
    if subtype != "FLOAT":
        data = np.clip(data, -1.0, 1.0)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(path, data.reshape(-1).astype(np.float32), sample_rate, subtype=subtype)
    return path
