"""Wavetable importers.

Example usage:
    >>> from wtforge.importers import import_wav
    >>> wavetable = import_wav("Organ_12.wav", number_frames=64)  # doctest: +SKIP
    >>> wavetable.name, wavetable.preset_number  # doctest: +SKIP
    ('Organ', 12)
"""

from wtforge.importers.samples import import_from_samples, parse_wavetable_name
from wtforge.importers.wav import detect_wav_wavetable, import_wav, read_mono_samples

__all__ = [
    "import_from_samples",
    "parse_wavetable_name",
    "import_wav",
    "read_mono_samples",
    "detect_wav_wavetable",
]
