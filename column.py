'''
column.py -- a single 16x256x16 chunk column: block states, light and biomes, and
the binary layout the server streams them in.

Column data is laid out section by section (16 blocks high, bottom up) for the
sections flagged in the presence bitmap:

    block states   4096 little-endian uint16 per section, y/z/x order
    block light    2048 bytes per section, two values per byte, low nibble first
    sky light      2048 bytes per section (only when sky light is sent)
    biomes         256 bytes, z/x order (only for full columns)
'''

import numpy

from config import (
    CHUNK_WIDTH,
    CHUNK_HEIGHT,
    SECTION_HEIGHT,
    SECTIONS_PER_CHUNK,
    SECTION_BLOCKS,
    SECTION_STATE_BYTES,
    SECTION_LIGHT_BYTES,
    BIOME_BYTES,
)
from blocks import state_type, state_data
from util import ones_in_short


class ChunkDecodeError(Exception):
    pass


def section_size(sky_light_sent):
    return SECTION_STATE_BYTES + SECTION_LIGHT_BYTES + (SECTION_LIGHT_BYTES if sky_light_sent else 0)


def column_size(bitmap, sky_light_sent, full_column=True):
    """ Number of bytes a column with presence `bitmap` occupies on the wire.

    """
    return ones_in_short(bitmap) * section_size(sky_light_sent) + (BIOME_BYTES if full_column else 0)


def sections_in(bitmap):
    return [s for s in range(SECTIONS_PER_CHUNK) if bitmap & (1 << s)]


def _as_byte_array(data):
    if isinstance(data, numpy.ndarray):
        return data.astype(numpy.uint8, copy=False).ravel()
    return numpy.frombuffer(data, dtype=numpy.uint8)


def _section_from_stream(flat):
    # stream order is y, z, x; storage is indexed [x, y, z]
    return flat.reshape(SECTION_HEIGHT, CHUNK_WIDTH, CHUNK_WIDTH).transpose(2, 0, 1)


def _section_to_stream(section):
    return section.transpose(1, 2, 0).ravel()


def unpack_nibbles(data):
    packed = _as_byte_array(data)
    values = numpy.empty(packed.size * 2, dtype=numpy.uint8)
    values[0::2] = packed & 0x0f
    values[1::2] = packed >> 4
    return values


def pack_nibbles(values):
    values = numpy.asarray(values, dtype=numpy.uint8).ravel()
    return ((values[0::2] & 0x0f) | ((values[1::2] & 0x0f) << 4)).astype(numpy.uint8).tobytes()


def parse_biomes(biomes):
    """ Biome ids in z/x order as a [x, z] array. """
    if isinstance(biomes, (bytes, bytearray, memoryview)):
        values = _as_byte_array(biomes)
    else:
        values = numpy.asarray(biomes)
    if values.size != BIOME_BYTES:
        raise ChunkDecodeError('expected %i biome values, got %i' % (BIOME_BYTES, values.size))
    try:
        values = values.astype(numpy.uint8)
    except (TypeError, ValueError) as e:
        raise ChunkDecodeError('bad biome values: %s' % e)
    return values.reshape(CHUNK_WIDTH, CHUNK_WIDTH).T.copy()


def _section_slice(s):
    return slice(s * SECTION_HEIGHT, (s + 1) * SECTION_HEIGHT)


class ChunkColumn(object):
    def __init__(self):
        self.blocks = numpy.zeros((CHUNK_WIDTH, CHUNK_HEIGHT, CHUNK_WIDTH), dtype=numpy.uint16)
        self.block_light = numpy.zeros((CHUNK_WIDTH, CHUNK_HEIGHT, CHUNK_WIDTH), dtype=numpy.uint8)
        self.sky_light = numpy.zeros((CHUNK_WIDTH, CHUNK_HEIGHT, CHUNK_WIDTH), dtype=numpy.uint8)
        self.biomes = numpy.zeros((CHUNK_WIDTH, CHUNK_WIDTH), dtype=numpy.uint8)

    def load(self, data, bitmap, sky_light_sent=True, full_column=True):
        """ Replace the sections flagged in `bitmap` with the contents of `data`.

        A full column also carries biomes and clears every section that is
        not present. Nothing is modified if `data` does not decode.

        """
        expected = column_size(bitmap, sky_light_sent, full_column)
        try:
            raw = _as_byte_array(data)
        except (TypeError, ValueError) as e:
            raise ChunkDecodeError('column data is not a byte buffer: %s' % e)
        if raw.size != expected:
            raise ChunkDecodeError('column data is %i bytes, expected %i for bitmap 0x%04x'
                                   % (raw.size, expected, bitmap & 0xffff))
        sections = sections_in(bitmap)
        n = len(sections)
        if full_column:
            blocks = numpy.zeros_like(self.blocks)
            block_light = numpy.zeros_like(self.block_light)
            sky_light = numpy.zeros_like(self.sky_light)
        else:
            blocks = self.blocks.copy()
            block_light = self.block_light.copy()
            sky_light = self.sky_light.copy()

        offset = 0
        states = raw[offset:offset + n * SECTION_STATE_BYTES].copy().view('<u2').astype(numpy.uint16)
        offset += n * SECTION_STATE_BYTES
        for i, s in enumerate(sections):
            blocks[:, _section_slice(s), :] = _section_from_stream(states[i * SECTION_BLOCKS:(i + 1) * SECTION_BLOCKS])
        for s in sections:
            block_light[:, _section_slice(s), :] = _section_from_stream(unpack_nibbles(raw[offset:offset + SECTION_LIGHT_BYTES]))
            offset += SECTION_LIGHT_BYTES
        if sky_light_sent:
            for s in sections:
                sky_light[:, _section_slice(s), :] = _section_from_stream(unpack_nibbles(raw[offset:offset + SECTION_LIGHT_BYTES]))
                offset += SECTION_LIGHT_BYTES
        biomes = None
        if full_column:
            biomes = parse_biomes(raw[offset:offset + BIOME_BYTES])
            offset += BIOME_BYTES

        self.blocks = blocks
        self.block_light = block_light
        self.sky_light = sky_light
        if biomes is not None:
            self.biomes = biomes

    def load_biomes(self, biomes):
        self.biomes = parse_biomes(biomes)

    def load_light(self, data, sky_light_mask, block_light_mask,
                   empty_sky_light_mask=0, empty_block_light_mask=0):
        """ Merge a light update into the column.

        Bit `s` of each mask refers to section `s`. `data` holds one nibble
        array per set bit of `sky_light_mask`, followed by one per set bit of
        `block_light_mask`; the empty masks zero the light of a section.

        """
        raw = _as_byte_array(data if data is not None else b'')
        offset = 0
        for s in sections_in(sky_light_mask):
            self.sky_light[:, _section_slice(s), :] = _section_from_stream(unpack_nibbles(raw[offset:offset + SECTION_LIGHT_BYTES]))
            offset += SECTION_LIGHT_BYTES
        for s in sections_in(block_light_mask):
            self.block_light[:, _section_slice(s), :] = _section_from_stream(unpack_nibbles(raw[offset:offset + SECTION_LIGHT_BYTES]))
            offset += SECTION_LIGHT_BYTES
        for s in sections_in(empty_sky_light_mask):
            self.sky_light[:, _section_slice(s), :] = 0
        for s in sections_in(empty_block_light_mask):
            self.block_light[:, _section_slice(s), :] = 0

    def dump(self, sky_light_sent=True, full_column=True, bitmap=None):
        """ Serialize the column into the layout `load` reads.

        Sections without any non-air block are left out unless `bitmap` is
        given. Returns a (data, bitmap) pair.

        """
        if bitmap is None:
            bitmap = 0
            for s in range(SECTIONS_PER_CHUNK):
                if self.blocks[:, _section_slice(s), :].any():
                    bitmap |= 1 << s
        sections = sections_in(bitmap)
        parts = []
        for s in sections:
            parts.append(_section_to_stream(self.blocks[:, _section_slice(s), :]).astype('<u2').tobytes())
        for s in sections:
            parts.append(pack_nibbles(_section_to_stream(self.block_light[:, _section_slice(s), :])))
        if sky_light_sent:
            for s in sections:
                parts.append(pack_nibbles(_section_to_stream(self.sky_light[:, _section_slice(s), :])))
        if full_column:
            parts.append(self.biomes.T.astype(numpy.uint8).tobytes())
        return b''.join(parts), bitmap

    def get_block_state_id(self, pos):
        x, y, z = pos
        return int(self.blocks[x, y, z])

    def set_block_state_id(self, pos, state):
        x, y, z = pos
        self.blocks[x, y, z] = state

    def get_block_type(self, pos):
        return state_type(self.get_block_state_id(pos))

    def get_block_data(self, pos):
        return state_data(self.get_block_state_id(pos))

    def get_block_light(self, pos):
        x, y, z = pos
        return int(self.block_light[x, y, z])

    def get_sky_light(self, pos):
        x, y, z = pos
        return int(self.sky_light[x, y, z])

    def get_biome(self, pos):
        x, _, z = pos
        return int(self.biomes[x, z])
