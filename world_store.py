'''
world_store.py -- the loaded chunk columns, keyed by (chunk_x, chunk_z), and the
Block records synthesized from them on every query.
'''

from column import ChunkColumn, column_size, parse_biomes
from blocks import state_type, state_data, block_name, bounding_box
from config import CHUNK_HEIGHT
from util import floored, column_key_for, local_position


class ChunkBulkMismatchError(Exception):
    """ The columns of a bulk batch do not add up to its payload length. """


class Block(object):
    def __init__(self, state_id, position, light=0, sky_light=0, biome=0,
                 sign_text=None, painting=None, block_entity=None):
        self.state_id = state_id
        self.type = state_type(state_id)
        self.metadata = state_data(state_id)
        self.name = block_name(self.type)
        self.bounding_box = bounding_box(self.type)
        self.position = position
        self.light = light
        self.sky_light = sky_light
        self.biome = biome
        self.sign_text = sign_text
        self.painting = painting
        self.block_entity = block_entity

    def __repr__(self):
        return 'Block(%s:%i at %r)' % (self.name, self.metadata, self.position)


def split_bulk(metas, data, sky_light_sent):
    """ Cut the concatenated payload of a bulk column batch into
    (key, bitmap, data) triples.

    The declared sizes must account for every byte of `data`.

    """
    sizes = [column_size(meta['bit_map'], sky_light_sent, True) for meta in metas]
    if sum(sizes) != len(data):
        raise ChunkBulkMismatchError('bulk batch declares %i bytes for %i columns, payload is %i bytes'
                                     % (sum(sizes), len(metas), len(data)))
    result = []
    offset = 0
    for meta, size in zip(metas, sizes):
        result.append(((meta['x'], meta['z']), meta['bit_map'], data[offset:offset + size]))
        offset += size
    return result


class ColumnStore(object):
    def __init__(self, overlays):
        self.columns = {}
        self.overlays = overlays

    def __len__(self):
        return len(self.columns)

    def __contains__(self, key):
        return key in self.columns

    def keys(self):
        return list(self.columns.keys())

    def column_at(self, chunk_x, chunk_z):
        return self.columns.get((chunk_x, chunk_z))

    def load_column(self, key, data, bitmap, sky_light_sent=True, full_column=True, biomes=None):
        """ Load column `key` from its wire data. Returns False when the
        empty bitmap means the column was unloaded instead.

        Raises ChunkDecodeError, leaving the store as it was for `key`.

        """
        if not bitmap:
            self.unload_column(key)
            return False
        biome_values = None
        if biomes is not None:
            biome_values = parse_biomes(biomes)
        column = self.columns.get(key)
        if column is None:
            column = ChunkColumn()
            column.load(data, bitmap, sky_light_sent, full_column)
            self.columns[key] = column
        else:
            column.load(data, bitmap, sky_light_sent, full_column)
        if biome_values is not None:
            column.biomes = biome_values
        return True

    def unload_column(self, key):
        return self.columns.pop(key, None)

    def load_light(self, key, data, sky_light_mask, block_light_mask,
                   empty_sky_light_mask=0, empty_block_light_mask=0):
        column = self.columns.get(key)
        if column is None:
            column = self.columns[key] = ChunkColumn()
        column.load_light(data, sky_light_mask, block_light_mask,
                          empty_sky_light_mask, empty_block_light_mask)

    def block_at(self, point):
        """ The Block at `point`, or None when nothing is known about it
        (column not loaded, or outside the world's height).

        """
        position = floored(point)
        if not 0 <= position[1] < CHUNK_HEIGHT:
            return None
        column = self.columns.get(column_key_for(position))
        if column is None:
            return None
        local = local_position(position)
        return Block(
            column.get_block_state_id(local),
            position,
            light=column.get_block_light(local),
            sky_light=column.get_sky_light(local),
            biome=column.get_biome(local),
            sign_text=self.overlays.signs.get(position),
            painting=self.overlays.paintings_by_position.get(position),
            block_entity=self.overlays.block_entities.get(position),
        )

    def set_block_state(self, point, state):
        position = floored(point)
        if not 0 <= position[1] < CHUNK_HEIGHT:
            return False
        column = self.columns.get(column_key_for(position))
        if column is None:
            return False
        column.set_block_state_id(local_position(position), state)
        return True

    def clear(self):
        self.columns = {}
