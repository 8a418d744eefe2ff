import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from byte_reader import ByteReader
from byte_writer import ByteWriter
from midi_errors import OutOfBounds
from vlq import encode_vlq, read_vlq, write_vlq

# Values from the SMF 1.0 specification table.
KNOWN = [
    (0x00000000, "00"),
    (0x00000040, "40"),
    (0x0000007F, "7F"),
    (0x00000080, "8100"),
    (0x00002000, "C000"),
    (0x00003FFF, "FF7F"),
    (0x00004000, "818000"),
    (0x001FFFFF, "FFFF7F"),
    (0x00200000, "81808000"),
    (0x0FFFFFFF, "FFFFFF7F"),
]


def test_encode_matches_reference_table():
    for value, hexed in KNOWN:
        assert encode_vlq(value) == bytes.fromhex(hexed), hex(value)


def test_decode_matches_reference_table():
    for value, hexed in KNOWN:
        r = ByteReader(bytes.fromhex(hexed) + b"\x99")
        assert read_vlq(r) == value
        assert r.peek_byte() == 0x99


def test_zero_is_one_byte():
    assert encode_vlq(0) == b"\x00"


def test_non_canonical_input_reencodes_minimal():
    r = ByteReader(b"\x80\x80\x05")
    value = read_vlq(r)
    assert value == 5
    assert encode_vlq(value) == b"\x05"


def test_values_beyond_four_bytes_round_trip():
    value = 1 << 40
    assert read_vlq(ByteReader(encode_vlq(value))) == value


def test_negative_rejected():
    with pytest.raises(ValueError):
        encode_vlq(-1)


def test_unterminated_sequence_runs_out_of_bounds():
    with pytest.raises(OutOfBounds):
        read_vlq(ByteReader(b"\x81\x80"))


def test_write_vlq_appends_to_writer():
    w = ByteWriter()
    write_vlq(w, 480)
    assert w.get_bytes() == b"\x83\x60"


def test_encoded_width_is_minimal_at_group_boundaries():
    for bits in range(1, 50):
        largest = (1 << bits) - 1
        assert len(encode_vlq(largest)) == -(-bits // 7), bits
        assert read_vlq(ByteReader(encode_vlq(largest))) == largest
