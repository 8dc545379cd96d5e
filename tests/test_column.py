import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from blocks import BLOCK_ID, state_id
from column import (
    ChunkColumn,
    ChunkDecodeError,
    column_size,
    section_size,
    pack_nibbles,
    unpack_nibbles,
)


def _sample_column():
    column = ChunkColumn()
    column.blocks[:, 0, :] = state_id(BLOCK_ID['bedrock'])
    column.blocks[3, 40, 7] = state_id(BLOCK_ID['log'], 2)
    column.blocks[15, 255, 15] = state_id(BLOCK_ID['glass'])
    column.block_light[3, 41, 7] = 14
    column.sky_light[:, 200:, :] = 15
    column.biomes[2, 9] = 4
    return column


def test_column_size_counts_present_sections():
    assert section_size(True) == 8192 + 2048 + 2048
    assert section_size(False) == 8192 + 2048
    assert column_size(0b11, True) == 2 * (8192 + 2048 + 2048) + 256
    assert column_size(0b11, False, full_column=False) == 2 * (8192 + 2048)
    # only the low 16 bits are sections
    assert column_size(0x10001, True) == column_size(0x1, True)


def test_nibbles_low_first():
    packed = pack_nibbles([1, 2, 15, 0])
    assert packed == bytes([0x21, 0x0f])
    assert list(unpack_nibbles(packed)) == [1, 2, 15, 0]


def test_state_stream_order_is_y_z_x():
    states = np.zeros(4096, dtype='<u2')
    states[2 * 256 + 3 * 16 + 4] = state_id(BLOCK_ID['stone'])
    data = states.tobytes() + bytes(2048) + bytes(2048) + bytes(256)
    column = ChunkColumn()
    column.load(data, 0b1, sky_light_sent=True, full_column=True)
    assert column.get_block_type((4, 2, 3)) == BLOCK_ID['stone']
    assert column.get_block_type((3, 2, 4)) == 0


def test_dump_load_round_trip():
    source = _sample_column()
    data, bitmap = source.dump()
    assert bitmap == (1 << 0) | (1 << 2) | (1 << 15)
    column = ChunkColumn()
    column.load(data, bitmap)
    assert np.array_equal(column.blocks, source.blocks)
    assert np.array_equal(column.block_light[:, :48, :], source.block_light[:, :48, :])
    assert column.get_block_light((3, 41, 7)) == 14
    assert column.get_sky_light((0, 255, 0)) == 15
    assert column.get_biome((2, 0, 9)) == 4
    assert column.get_block_type((3, 40, 7)) == BLOCK_ID['log']
    assert column.get_block_data((3, 40, 7)) == 2


def test_load_without_sky_light():
    source = _sample_column()
    data, bitmap = source.dump(sky_light_sent=False)
    column = ChunkColumn()
    column.load(data, bitmap, sky_light_sent=False)
    assert np.array_equal(column.blocks, source.blocks)
    assert not column.sky_light.any()


def test_partial_load_keeps_other_sections():
    column = _sample_column()
    patch = ChunkColumn()
    patch.blocks[:, 32:48, :] = state_id(BLOCK_ID['dirt'])
    data, bitmap = patch.dump(full_column=False, bitmap=1 << 2)
    column.load(data, bitmap, full_column=False)
    assert column.get_block_type((3, 40, 7)) == BLOCK_ID['dirt']
    assert column.get_block_type((0, 0, 0)) == BLOCK_ID['bedrock']
    assert column.get_biome((2, 0, 9)) == 4


def test_full_load_clears_missing_sections():
    column = _sample_column()
    replacement = ChunkColumn()
    replacement.blocks[:, 0, :] = state_id(BLOCK_ID['stone'])
    data, bitmap = replacement.dump()
    column.load(data, bitmap)
    assert column.get_block_type((3, 40, 7)) == 0
    assert column.get_block_type((15, 255, 15)) == 0


def test_bad_length_raises_and_leaves_column_alone():
    column = _sample_column()
    before = column.blocks.copy()
    data, bitmap = _sample_column().dump()
    with pytest.raises(ChunkDecodeError):
        column.load(data[:-1], bitmap)
    with pytest.raises(ChunkDecodeError):
        column.load(data + b'\x00', bitmap)
    assert np.array_equal(column.blocks, before)


def test_load_biomes_checks_length():
    column = ChunkColumn()
    column.load_biomes(list(range(256)))
    assert column.get_biome((1, 0, 2)) == 2 * 16 + 1
    with pytest.raises(ChunkDecodeError):
        column.load_biomes([0] * 10)


def test_load_light_masks():
    column = ChunkColumn()
    column.block_light[:, 16:32, :] = 9
    sky = pack_nibbles(np.full(4096, 15, dtype=np.uint8))
    block = pack_nibbles(np.full(4096, 7, dtype=np.uint8))
    column.load_light(sky + block, sky_light_mask=1 << 3, block_light_mask=1 << 0,
                      empty_block_light_mask=1 << 1)
    assert column.get_sky_light((5, 50, 5)) == 15
    assert column.get_sky_light((5, 70, 5)) == 0
    assert column.get_block_light((5, 3, 5)) == 7
    assert column.get_block_light((5, 20, 5)) == 0


def test_set_block_state_id():
    column = ChunkColumn()
    column.set_block_state_id((1, 2, 3), state_id(BLOCK_ID['chest'], 5))
    assert column.get_block_state_id((1, 2, 3)) == (54 << 4) | 5
