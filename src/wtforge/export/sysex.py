"""Waldorf Blofeld wavetable SysEx codec.

A Blofeld user wavetable is sent as 64 SysEx messages, one per wave, each
410 bytes long:

    +--------+------------------------------------------------------+
    | offset | content                                              |
    +--------+------------------------------------------------------+
    | 0      | 0xF0 SysEx start                                     |
    | 1..4   | 0x3E Waldorf, 0x13 Blofeld, 0x00 device, 0x12 WTBL   |
    | 5      | wavetable slot (0x50 + slot - 80)                    |
    | 6      | wave number 0..63                                    |
    | 7      | format, always 0x00                                  |
    | 8..391 | 128 samples x 3 bytes, 21-bit two's complement,      |
    |        | 7 bits per byte, most significant first              |
    | 392..  | 14 name bytes (7-bit ASCII)                          |
    | 406    | 2 reserved zero bytes                                |
    | 408    | checksum: sum of bytes 7..407 masked to 7 bits       |
    | 409    | 0xF7 SysEx end                                       |
    +--------+------------------------------------------------------+

Samples are clamped to [-1, 1], scaled by 2^20 - 1 and rounded half-up.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike, NDArray

from wtforge.errors import (
    InvalidNameError,
    InvalidSampleError,
    InvalidSlotError,
    SysexDecodeError,
    WrongGeometryError,
)
from wtforge.types import (
    BLOFELD_NAME_LENGTH,
    BLOFELD_NUM_WAVES,
    BLOFELD_SAMPLES_PER_WAVE,
    BLOFELD_SLOT_RANGE,
    WavetableData,
    WavetableWithMetadata,
)
from wtforge.utils import is_printable_ascii

SYSEX_START = 0xF0
SYSEX_END = 0xF7
WALDORF_ID = 0x3E
BLOFELD_ID = 0x13
BROADCAST_DEVICE_ID = 0x00
WAVETABLE_DUMP_ID = 0x12
WAVE_FORMAT = 0x00

SLOT_BASE = 0x50
SAMPLE_SCALE = 1_048_575  # 2^20 - 1
SAMPLE_MASK = 0x1FFFFF  # 21 bits
SAMPLE_SIGN_BIT = 0x100000
BYTES_PER_SAMPLE = 3

HEADER_SIZE = 8
SAMPLES_OFFSET = HEADER_SIZE
NAME_OFFSET = SAMPLES_OFFSET + BLOFELD_SAMPLES_PER_WAVE * BYTES_PER_SAMPLE
RESERVED_OFFSET = NAME_OFFSET + BLOFELD_NAME_LENGTH
CHECKSUM_OFFSET = RESERVED_OFFSET + 2
CHECKSUM_START = 7
WAVE_MESSAGE_SIZE = CHECKSUM_OFFSET + 2
DUMP_SIZE = BLOFELD_NUM_WAVES * WAVE_MESSAGE_SIZE


@dataclass(frozen=True)
class BlofeldDump:
    """A decoded wavetable dump."""

    data: WavetableData
    name: str
    slot: int


def validate_slot(slot: int) -> None:
    if slot not in BLOFELD_SLOT_RANGE:
        raise InvalidSlotError(slot)


def validate_name(name: str) -> None:
    if len(name) > BLOFELD_NAME_LENGTH:
        raise InvalidNameError(name, f"longer than {BLOFELD_NAME_LENGTH} characters")
    bad = [c for c in name if not is_printable_ascii(c)]
    if bad:
        raise InvalidNameError(name, f"characters outside printable ASCII: {''.join(bad)!r}")


def pad_name(name: str) -> str:
    """Right-pad a valid name with spaces to the fixed 14-character width."""
    validate_name(name)
    return name.ljust(BLOFELD_NAME_LENGTH)


def quantize_samples(samples: ArrayLike) -> NDArray[np.int64]:
    """Clamp to [-1, 1] and scale to signed 21-bit integers, rounding half-up."""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    return np.floor(clipped * SAMPLE_SCALE + 0.5).astype(np.int64)


def pack_samples(values: NDArray[np.int64]) -> bytes:
    """Split 21-bit two's complement values into three 7-bit bytes each, MSB first."""
    raw = values & SAMPLE_MASK
    packed = np.stack([(raw >> 14) & 0x7F, (raw >> 7) & 0x7F, raw & 0x7F], axis=-1)
    return packed.astype(np.uint8).tobytes()


def unpack_samples(data: bytes) -> NDArray[np.int64]:
    """Inverse of ``pack_samples``: rebuild signed integers from 7-bit triplets."""
    triplets = np.frombuffer(data, dtype=np.uint8).astype(np.int64).reshape(-1, BYTES_PER_SAMPLE)
    raw = (triplets[:, 0] << 14) | (triplets[:, 1] << 7) | triplets[:, 2]
    return np.where(raw & SAMPLE_SIGN_BIT, raw - (SAMPLE_MASK + 1), raw)


def sysex_checksum(message: bytes | bytearray | memoryview) -> int:
    """Checksum of one wave message: bytes 7..407 summed, masked to 7 bits."""
    return sum(message[CHECKSUM_START:CHECKSUM_OFFSET]) & 0x7F


def encode_blofeld_wavetable(
    wavetable: WavetableWithMetadata | ArrayLike,
    name: str,
    slot: int,
) -> bytes:
    """Encode a 64 x 128 wavetable as a Blofeld SysEx wavetable dump.

    Names shorter than 14 characters are padded with spaces.

    Args:
        wavetable: Table of 64 frames x 128 samples.
        name: Up to 14 printable ASCII characters.
        slot: User wavetable slot, 80..118.

    Returns:
        64 concatenated 410-byte SysEx messages.

    Raises:
        InvalidSlotError: If the slot is out of range.
        InvalidNameError: If the name is too long or not printable ASCII.
        WrongGeometryError: If the table is not 64 x 128.
        InvalidSampleError: If the table contains NaN or infinite values.
    """
    validate_slot(slot)
    name_bytes = bytes(ord(c) & 0x7F for c in pad_name(name))

    data = wavetable.data if isinstance(wavetable, WavetableWithMetadata) else wavetable
    data = np.asarray(data, dtype=np.float64)
    expected = (BLOFELD_NUM_WAVES, BLOFELD_SAMPLES_PER_WAVE)
    if data.shape != expected:
        raise WrongGeometryError(expected, data.shape)
    if not np.all(np.isfinite(data)):
        raise InvalidSampleError(int(np.sum(np.isnan(data))), int(np.sum(np.isinf(data))))

    quantized = quantize_samples(data)
    payload = bytearray(DUMP_SIZE)

    for wave in range(BLOFELD_NUM_WAVES):
        start = wave * WAVE_MESSAGE_SIZE
        message = memoryview(payload)[start : start + WAVE_MESSAGE_SIZE]

        message[0:HEADER_SIZE] = bytes(
            [
                SYSEX_START,
                WALDORF_ID,
                BLOFELD_ID,
                BROADCAST_DEVICE_ID,
                WAVETABLE_DUMP_ID,
                SLOT_BASE + slot - BLOFELD_SLOT_RANGE.start,
                wave & 0x7F,
                WAVE_FORMAT,
            ]
        )
        message[SAMPLES_OFFSET:NAME_OFFSET] = pack_samples(quantized[wave])
        message[NAME_OFFSET:RESERVED_OFFSET] = name_bytes
        # Reserved bytes are already zero
        message[CHECKSUM_OFFSET] = sysex_checksum(message)
        message[CHECKSUM_OFFSET + 1] = SYSEX_END

    return bytes(payload)


def decode_blofeld_wavetable(payload: bytes | bytearray) -> BlofeldDump:
    """Decode and verify a Blofeld SysEx wavetable dump.

    Raises:
        SysexDecodeError: If the payload has the wrong length, bad framing,
            an unexpected header, inconsistent slots or wave numbers, or a
            checksum mismatch.
    """
    if len(payload) != DUMP_SIZE:
        raise SysexDecodeError(f"expected {DUMP_SIZE} bytes, got {len(payload)}")

    data = np.empty((BLOFELD_NUM_WAVES, BLOFELD_SAMPLES_PER_WAVE), dtype=np.float64)
    # Every wave repeats the slot and name; wave 0 is the reference copy
    slot_byte = payload[5]
    name_bytes = payload[NAME_OFFSET:RESERVED_OFFSET]

    for wave in range(BLOFELD_NUM_WAVES):
        start = wave * WAVE_MESSAGE_SIZE
        message = payload[start : start + WAVE_MESSAGE_SIZE]

        if message[0] != SYSEX_START:
            raise SysexDecodeError("missing SysEx start byte", wave, start)
        if message[-1] != SYSEX_END:
            raise SysexDecodeError("missing SysEx end byte", wave, start + WAVE_MESSAGE_SIZE - 1)
        if (message[1], message[2], message[4]) != (WALDORF_ID, BLOFELD_ID, WAVETABLE_DUMP_ID):
            raise SysexDecodeError("not a Blofeld wavetable dump header", wave, start + 1)

        if message[5] != slot_byte:
            raise SysexDecodeError(
                f"slot byte {message[5]:#04x} differs from first wave {slot_byte:#04x}",
                wave,
                start + 5,
            )
        if message[6] != wave:
            raise SysexDecodeError(f"wave number {message[6]} out of order", wave, start + 6)

        expected_checksum = sysex_checksum(message)
        if message[CHECKSUM_OFFSET] != expected_checksum:
            raise SysexDecodeError(
                f"checksum {message[CHECKSUM_OFFSET]:#04x}, expected {expected_checksum:#04x}",
                wave,
                start + CHECKSUM_OFFSET,
            )

        data[wave] = unpack_samples(message[SAMPLES_OFFSET:NAME_OFFSET]) / SAMPLE_SCALE

    slot = slot_byte - SLOT_BASE + BLOFELD_SLOT_RANGE.start
    if slot not in BLOFELD_SLOT_RANGE:
        raise SysexDecodeError(f"slot {slot} outside 80..118", 0, 5)

    name = name_bytes.decode("ascii", errors="replace").rstrip(" \x00")
    return BlofeldDump(data=data, name=name, slot=slot)


def write_sysex(path: Path | str, payload: bytes) -> None:
    """Write a SysEx payload to a ``.syx`` file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)


def save_blofeld_wavetable(
    path: Path | str,
    wavetable: WavetableWithMetadata | ArrayLike,
    name: str,
    slot: int,
) -> bytes:
    """Encode a wavetable and write the dump to ``path``; returns the payload."""
    payload = encode_blofeld_wavetable(wavetable, name, slot)
    write_sysex(path, payload)
    return payload
