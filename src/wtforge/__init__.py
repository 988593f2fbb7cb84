"""wtforge - Wavetable building and Blofeld export toolkit.

This package builds wavetables by interpolating between a few keyframe
waveforms, imports wavetables from audio, and exports them as Waldorf
Blofeld SysEx wavetable dumps.

Example Usage
-------------
>>> from wtforge import build_wavetable_from_shapes, encode_blofeld_wavetable
>>>
>>> # Morph from sine through square to sawtooth over 64 frames of 128 samples
>>> table = build_wavetable_from_shapes(["sine", "square", "sawtooth"], 64, 128)
>>> table.keyframes
(0, 32, 63)
>>>
>>> # Encode for user wavetable slot 80
>>> payload = encode_blofeld_wavetable(table, "SinSqrSaw", slot=80)
>>> len(payload)
26240
"""

from wtforge.dsp.interpolate import (
    build_wavetable,
    build_wavetable_explicit,
    build_wavetable_from_shape_keyframes,
    build_wavetable_from_shapes,
)
from wtforge.dsp.resample import fit_wavetable
from wtforge.dsp.waves import WaveGenerator, generate_waveform, parse_shape
from wtforge.errors import InvalidInputError, WavetableError
from wtforge.export import (
    decode_blofeld_wavetable,
    encode_blofeld_wavetable,
    save_blofeld_wavetable,
    save_wavetable_wav,
)
from wtforge.importers import import_from_samples, import_wav, parse_wavetable_name
from wtforge.types import Keyframe, WaveShape, WavetableWithMetadata
from wtforge.validation import ValidationResult, validate_wavetable

__all__ = [
    # Types
    "WaveShape",
    "Keyframe",
    "WavetableWithMetadata",
    # Synthesis
    "WaveGenerator",
    "generate_waveform",
    "parse_shape",
    # Building
    "build_wavetable",
    "build_wavetable_explicit",
    "build_wavetable_from_shapes",
    "build_wavetable_from_shape_keyframes",
    "fit_wavetable",
    # Import
    "import_from_samples",
    "import_wav",
    "parse_wavetable_name",
    # Export
    "encode_blofeld_wavetable",
    "decode_blofeld_wavetable",
    "save_blofeld_wavetable",
    "save_wavetable_wav",
    # Validation
    "validate_wavetable",
    "ValidationResult",
    "WavetableError",
    "InvalidInputError",
]
