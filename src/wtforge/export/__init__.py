"""Wavetable export.

Two sinks are provided: a Waldorf Blofeld SysEx dump for the fixed
64 x 128 device geometry, and a plain WAV file of concatenated frames.

Example Usage
-------------
>>> from wtforge.dsp.interpolate import build_wavetable_from_shapes
>>> from wtforge.export import encode_blofeld_wavetable
>>> table = build_wavetable_from_shapes(["sine", "sawtooth"], 64, 128)
>>> payload = encode_blofeld_wavetable(table, "SineToSaw", slot=80)
>>> len(payload)
26240
"""

from wtforge.export.sysex import (
    BlofeldDump,
    decode_blofeld_wavetable,
    encode_blofeld_wavetable,
    save_blofeld_wavetable,
    write_sysex,
)
from wtforge.export.wav import save_wavetable_wav

__all__ = [
    "BlofeldDump",
    "encode_blofeld_wavetable",
    "decode_blofeld_wavetable",
    "save_blofeld_wavetable",
    "write_sysex",
    "save_wavetable_wav",
]
