import pytest

from spark_io.codec import FrameDecoder, from_seven_bit_pair, to_analog_resolution, to_seven_bit_pair
from spark_io.models import DecodedFrame

"""
Protocol Tests: 7-bit pair encoding and frame reassembly.
"""


@pytest.mark.parametrize("value, expected", [
    (0, (0, 0)),
    (127, (127, 0)),
    (128, (0, 1)),
    (1000, (0x68, 0x07)),
    (16383, (127, 127)),
])
def test_to_seven_bit_pair(value, expected):
    assert to_seven_bit_pair(value) == expected


def test_seven_bit_pair_survives_the_full_14_bit_range():
    assert all(from_seven_bit_pair(to_seven_bit_pair(v)) == v for v in range(16384))


def test_from_seven_bit_pair_accepts_scalars_or_sequence():
    assert from_seven_bit_pair(0x68, 0x07) == 1000
    assert from_seven_bit_pair([0x68, 0x07]) == 1000
    assert from_seven_bit_pair((0x68, 0x07)) == 1000


def test_to_seven_bit_pair_drops_bits_above_14():
    assert to_seven_bit_pair(16384) == (0, 0)


def test_analog_resolution_shifts_to_10_bits():
    assert to_analog_resolution(4095) == 1023
    assert to_analog_resolution(3) == 0


def test_decoder_emits_frames_in_order():
    decoder = FrameDecoder()
    frames = decoder.feed(bytes([0x03, 0x02, 0x01, 0x00, 0x04, 0x0A, 0x68, 0x07]))

    assert frames == [
        DecodedFrame(action=0x03, pin=2, value=1),
        DecodedFrame(action=0x04, pin=10, value=1000),
    ]
    assert decoder.pending == 0


def test_decoder_keeps_partial_frame_until_completed():
    decoder = FrameDecoder()

    assert decoder.feed(bytes([0x03, 0x07])) == []
    assert decoder.pending == 2

    assert decoder.feed(bytes([0x01, 0x00, 0x03])) == [DecodedFrame(action=0x03, pin=7, value=1)]
    assert decoder.pending == 1


def test_decoder_output_does_not_depend_on_chunking():
    stream = bytes([
        0x03, 0x00, 0x01, 0x00,
        0x04, 0x11, 0x7F, 0x1F,
        0x05, 0x00, 0x05, 0x00,
        0x03, 0x07, 0x00, 0x00,
    ])

    all_at_once = FrameDecoder().feed(stream)

    byte_by_byte_decoder = FrameDecoder()
    byte_by_byte = []
    for b in stream:
        byte_by_byte.extend(byte_by_byte_decoder.feed(bytes([b])))

    uneven_decoder = FrameDecoder()
    uneven = []
    for chunk in (stream[:3], stream[3:9], stream[9:10], stream[10:]):
        uneven.extend(uneven_decoder.feed(chunk))

    assert len(all_at_once) == 4
    assert byte_by_byte == all_at_once
    assert uneven == all_at_once


def test_decoder_drains_complete_frames_behind_a_partial_one():
    # Six bytes queued is not a multiple of four, the first frame is still emitted
    decoder = FrameDecoder()

    frames = decoder.feed(bytes([0x03, 0x04, 0x01, 0x00, 0x04, 0x11]))

    assert frames == [DecodedFrame(0x03, 4, 1)]
    assert decoder.pending == 2

    assert decoder.feed(bytes([0x7F, 0x1F, 0x03])) == [DecodedFrame(0x04, 17, 4095)]
    assert decoder.pending == 1


def test_decoder_has_no_resync_after_a_dropped_byte():
    decoder = FrameDecoder()
    # First byte of the first frame is missing: everything shifts by one.
    frames = decoder.feed(bytes([0x02, 0x01, 0x00, 0x03, 0x05, 0x00, 0x00]))

    assert frames == [DecodedFrame(action=0x02, pin=0x01, value=0x00 | (0x03 << 7))]
    assert decoder.pending == 3
