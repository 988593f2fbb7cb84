"""Unit tests for the Blofeld SysEx codec."""

from pathlib import Path

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wtforge.dsp.interpolate import build_wavetable_from_shapes
from wtforge.errors import (
    InvalidInputError,
    InvalidNameError,
    InvalidSampleError,
    InvalidSlotError,
    SysexDecodeError,
    WrongGeometryError,
)
from wtforge.export.sysex import (
    DUMP_SIZE,
    WAVE_MESSAGE_SIZE,
    decode_blofeld_wavetable,
    encode_blofeld_wavetable,
    pack_samples,
    pad_name,
    quantize_samples,
    save_blofeld_wavetable,
    unpack_samples,
)


def _device_table(value: float = 0.0) -> np.ndarray:
    return np.full((64, 128), value)


def _first_sample_bytes(payload: bytes) -> tuple[int, int, int]:
    return payload[8], payload[9], payload[10]


class TestQuantization:
    """Test sample scaling and 7-bit packing."""

    def test_full_scale(self):
        """Test +1 and -1 map to plus and minus 2^20 - 1."""
        assert quantize_samples([1.0, -1.0, 0.0]).tolist() == [1048575, -1048575, 0]

    def test_clamping(self):
        """Test values past full scale clamp before scaling."""
        assert quantize_samples([1.5, -3.0]).tolist() == [1048575, -1048575]

    def test_rounds_to_nearest_step(self):
        """Test values round to the nearest quantization step."""
        step = 1 / 1048575
        assert quantize_samples([0.4 * step, 0.6 * step, -0.6 * step]).tolist() == [0, 1, -1]

    def test_pack_positive_full_scale(self):
        """Test the byte triplet for +1."""
        assert pack_samples(np.array([1048575])) == bytes([0x3F, 0x7F, 0x7F])

    def test_pack_negative_full_scale(self):
        """Test the byte triplet for -1 in 21-bit two's complement."""
        assert pack_samples(np.array([-1048575])) == bytes([0x40, 0x00, 0x01])

    def test_pack_minus_one(self):
        """Test -1 LSB sets every payload bit."""
        assert pack_samples(np.array([-1])) == bytes([0x7F, 0x7F, 0x7F])

    @given(st.lists(st.integers(min_value=-1048575, max_value=1048575), min_size=1, max_size=64))
    def test_unpack_inverts_pack_property(self, values):
        """Property: unpacking restores the packed integers."""
        packed = pack_samples(np.array(values, dtype=np.int64))

        assert all(b < 0x80 for b in packed)
        assert unpack_samples(packed).tolist() == values


class TestPadName:
    """Test fixed-width name padding."""

    def test_pads_with_spaces(self):
        """Test short names are right-padded to 14 characters."""
        assert pad_name("Saw") == "Saw" + " " * 11

    def test_full_length_unchanged(self):
        """Test 14-character names pass through."""
        assert pad_name("ABCDEFGHIJKLMN") == "ABCDEFGHIJKLMN"

    def test_too_long(self):
        """Test names over 14 characters are rejected."""
        with pytest.raises(InvalidNameError):
            pad_name("ABCDEFGHIJKLMNO")


class TestEncodeBlofeldWavetable:
    """Test SysEx dump encoding."""

    def test_message_layout(self):
        """Test size, framing and header of every wave message."""
        payload = encode_blofeld_wavetable(_device_table(), "Test", slot=80)

        assert len(payload) == DUMP_SIZE == 64 * 410
        for wave in range(64):
            message = payload[wave * WAVE_MESSAGE_SIZE : (wave + 1) * WAVE_MESSAGE_SIZE]
            assert message[0] == 0xF0
            assert message[1:5] == bytes([0x3E, 0x13, 0x00, 0x12])
            assert message[5] == 0x50
            assert message[6] == wave
            assert message[7] == 0x00
            assert message[392:406] == b"Test          "
            assert message[406:408] == b"\x00\x00"
            assert message[408] == sum(message[7:408]) & 0x7F
            assert message[409] == 0xF7
            assert all(b < 0x80 for b in message[1:409])

    def test_checksums(self):
        """Test each checksum is the 7-bit sum of bytes 7 through 407."""
        table = build_wavetable_from_shapes(["sine", "square", "triangle"], 64, 128)
        payload = encode_blofeld_wavetable(table, "Morph", slot=100)

        for wave in range(64):
            message = payload[wave * WAVE_MESSAGE_SIZE : (wave + 1) * WAVE_MESSAGE_SIZE]
            assert message[408] == sum(message[7:408]) & 0x7F

    def test_slot_byte(self):
        """Test the slot byte for the last user slot."""
        payload = encode_blofeld_wavetable(_device_table(), "Last", slot=118)
        assert payload[5] == 0x50 + 38

    def test_sample_bytes(self):
        """Test the first sample triplet for full-scale tables."""
        positive = encode_blofeld_wavetable(_device_table(1.0), "Pos", slot=80)
        negative = encode_blofeld_wavetable(_device_table(-1.0), "Neg", slot=80)

        assert _first_sample_bytes(positive) == (0x3F, 0x7F, 0x7F)
        assert _first_sample_bytes(negative) == (0x40, 0x00, 0x01)

    def test_out_of_range_clamps(self):
        """Test 1.5 encodes exactly like 1.0."""
        clipped = encode_blofeld_wavetable(_device_table(1.5), "Same", slot=80)
        full = encode_blofeld_wavetable(_device_table(1.0), "Same", slot=80)
        assert clipped == full

    def test_accepts_wavetable_with_metadata(self):
        """Test the metadata wrapper encodes like its raw data."""
        table = build_wavetable_from_shapes(["sine", "sawtooth"], 64, 128)
        assert encode_blofeld_wavetable(table, "A", 80) == encode_blofeld_wavetable(
            table.data, "A", 80
        )

    @pytest.mark.parametrize("slot", [79, 119, 0, -1])
    def test_invalid_slot(self, slot):
        """Test slots outside 80..118 are rejected."""
        with pytest.raises(InvalidSlotError):
            encode_blofeld_wavetable(_device_table(), "Test", slot=slot)

    @pytest.mark.parametrize("name", ["ABCDEFGHIJKLMNO", "Tab\there", "Ünicode"])
    def test_invalid_name(self, name):
        """Test over-long and non-printable names are rejected."""
        with pytest.raises(InvalidNameError):
            encode_blofeld_wavetable(_device_table(), name, slot=80)

    @pytest.mark.parametrize("shape", [(63, 128), (64, 127), (64 * 128,)])
    def test_wrong_geometry(self, shape):
        """Test tables that are not 64 x 128 are rejected."""
        with pytest.raises(WrongGeometryError) as e:
            encode_blofeld_wavetable(np.zeros(shape), "Test", slot=80)
        assert e.value.actual == shape

    def test_non_finite(self):
        """Test NaN samples are rejected rather than encoded."""
        table = _device_table()
        table[3, 7] = np.nan

        with pytest.raises(InvalidSampleError) as e:
            encode_blofeld_wavetable(table, "Test", slot=80)
        assert e.value.nan_count == 1

    def test_errors_share_base(self):
        """Test every precondition failure is an InvalidInputError."""
        for error in (InvalidSlotError, InvalidNameError, WrongGeometryError, InvalidSampleError):
            assert issubclass(error, InvalidInputError)

    def test_slot_checked_before_geometry(self):
        """Test the slot is the first precondition checked."""
        with pytest.raises(InvalidSlotError):
            encode_blofeld_wavetable(np.zeros((2, 2)), "Test", slot=10)


class TestDecodeBlofeldWavetable:
    """Test SysEx dump decoding and verification."""

    def test_decode(self):
        """Test decoding restores name, slot and quantized samples."""
        table = build_wavetable_from_shapes(["sine", "sawtooth"], 64, 128)
        payload = encode_blofeld_wavetable(table, "SineSaw", slot=95)

        dump = decode_blofeld_wavetable(payload)

        assert dump.name == "SineSaw"
        assert dump.slot == 95
        assert dump.data.shape == (64, 128)
        np.testing.assert_allclose(dump.data, table.data, atol=1e-6)

    def test_wrong_length(self):
        """Test truncated dumps are rejected."""
        payload = encode_blofeld_wavetable(_device_table(), "Test", slot=80)
        with pytest.raises(SysexDecodeError):
            decode_blofeld_wavetable(payload[:-1])

    def test_corrupt_checksum(self):
        """Test a flipped sample byte is caught by the checksum."""
        payload = bytearray(encode_blofeld_wavetable(_device_table(), "Test", slot=80))
        payload[5 * WAVE_MESSAGE_SIZE + 100] ^= 0x01

        with pytest.raises(SysexDecodeError) as e:
            decode_blofeld_wavetable(bytes(payload))
        assert e.value.wave == 5
        assert e.value.offset == 5 * WAVE_MESSAGE_SIZE + 408

    def test_missing_end_byte(self):
        """Test framing errors report the wave."""
        payload = bytearray(encode_blofeld_wavetable(_device_table(), "Test", slot=80))
        payload[WAVE_MESSAGE_SIZE - 1] = 0x00

        with pytest.raises(SysexDecodeError, match="wave 0"):
            decode_blofeld_wavetable(bytes(payload))

    def test_out_of_order_waves(self):
        """Test a wave number that does not match its position."""
        payload = bytearray(encode_blofeld_wavetable(_device_table(), "Test", slot=80))
        payload[2 * WAVE_MESSAGE_SIZE + 6] = 7

        with pytest.raises(SysexDecodeError, match="out of order"):
            decode_blofeld_wavetable(bytes(payload))

    def test_inconsistent_slot(self):
        """Test a wave whose slot byte differs from wave 0."""
        payload = bytearray(encode_blofeld_wavetable(_device_table(), "Test", slot=80))
        payload[3 * WAVE_MESSAGE_SIZE + 5] = 0x51

        with pytest.raises(SysexDecodeError, match="differs from first wave") as e:
            decode_blofeld_wavetable(bytes(payload))
        assert e.value.wave == 3
        assert e.value.offset == 3 * WAVE_MESSAGE_SIZE + 5

    def test_slot_out_of_range(self):
        """Test a consistent slot byte below the user range."""
        payload = bytearray(encode_blofeld_wavetable(_device_table(), "Test", slot=80))
        for wave in range(64):
            payload[wave * WAVE_MESSAGE_SIZE + 5] = 0x4F

        with pytest.raises(SysexDecodeError, match="slot 79"):
            decode_blofeld_wavetable(bytes(payload))

    def test_decode_bytearray(self):
        """Test mutable buffers decode like bytes."""
        payload = encode_blofeld_wavetable(_device_table(0.25), "Buffer", slot=84)

        dump = decode_blofeld_wavetable(bytearray(payload))

        assert dump.name == "Buffer"
        assert dump.slot == 84

    @given(seed=st.integers(min_value=0, max_value=2**16))
    @settings(max_examples=10, deadline=None)
    def test_quantization_error_property(self, seed):
        """Property: decoded samples are within half a quantization step."""
        table = np.random.default_rng(seed).uniform(-1, 1, (64, 128))

        dump = decode_blofeld_wavetable(encode_blofeld_wavetable(table, "Rand", slot=80))

        assert np.max(np.abs(dump.data - table)) <= 0.5 / 1048575 + 1e-12


class TestSaveBlofeldWavetable:
    """Test writing dumps to disk."""

    def test_save(self, tmp_path: Path):
        """Test the written file matches the returned payload."""
        path = tmp_path / "nested" / "table.syx"
        payload = save_blofeld_wavetable(path, _device_table(0.5), "Half", slot=81)

        assert path.read_bytes() == payload
        assert decode_blofeld_wavetable(payload).slot == 81
