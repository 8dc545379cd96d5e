'''
world.py -- client side model of a world streamed from the server.

World routes decoded packets into the column store and the overlay index, keeps
overlays consistent with block type changes, and reports what changed through
pyglet events:

    on_column_load(corner)       a column finished loading
    on_column_unload(corner)     a column was dropped
    on_block_update(old, new)    a block or its sign text changed
    on_error(exc)                a fragment could not be decoded

Handlers for a single position can be attached with `watch_block`.
'''

# standard library imports
from collections import deque

# pyglet imports
from pyglet.event import EventDispatcher

# local imports
import config
import logutil
from column import ChunkDecodeError
from overlays import OverlayIndex, Painting
from search import visible_position, find_block
from util import floored, column_corner, vec_add
from world_store import ColumnStore, split_bulk


class SignTextError(ValueError):
    pass


def _xyz(value):
    if isinstance(value, dict):
        return (value['x'], value['y'], value['z'])
    x, y, z = value
    return (x, y, z)


class World(EventDispatcher):

    def __init__(self):
        self.overlays = OverlayIndex()
        self.store = ColumnStore(self.overlays)
        self.dimension = None
        self.block_watchers = {}
        self.packets_handled = 0
        self._server_outbox = deque()

    def block_at(self, point):
        return self.store.block_at(point)

    def column_at(self, chunk_x, chunk_z):
        return self.store.column_at(chunk_x, chunk_z)

    def find_block(self, point, matching, max_distance=None):
        return find_block(self.store.block_at, point, matching, max_distance)

    def is_visible(self, a, b):
        return visible_position(self.store.block_at, a, b)

    def can_see_block(self, block, eye_position):
        """ Line of sight from an observer's eyes to `block` (or anything
        else with a `position`).

        """
        return visible_position(self.store.block_at, eye_position, block.position)

    def has_sky_light(self):
        return self.dimension in getattr(config, 'SKYLIGHT_DIMENSIONS', ())

    def add_column(self, chunk_x, chunk_z, data, bitmap, sky_light_sent=None, full_column=True, biomes=None):
        key = (chunk_x, chunk_z)
        corner = column_corner(key)
        if sky_light_sent is None:
            sky_light_sent = self.has_sky_light()
        try:
            loaded = self.store.load_column(key, data, bitmap, sky_light_sent, full_column, biomes)
        except ChunkDecodeError as e:
            logutil.log("WORLD", f"dropping column {key}: {e}", level="ERROR")
            self.dispatch_event('on_error', e)
            return False
        if loaded:
            logutil.log("COLUMN", f"loaded column {key} bitmap=0x{bitmap & 0xffff:04x}", level="DEBUG")
            self.dispatch_event('on_column_load', corner)
        else:
            logutil.log("COLUMN", f"unloaded column {key}", level="DEBUG")
            self.dispatch_event('on_column_unload', corner)
        return loaded

    def remove_column(self, chunk_x, chunk_z):
        key = (chunk_x, chunk_z)
        self.store.unload_column(key)
        logutil.log("COLUMN", f"unloaded column {key}", level="DEBUG")
        self.dispatch_event('on_column_unload', column_corner(key))

    def add_columns_bulk(self, metas, data, sky_light_sent):
        """ Load a batch of concatenated full columns.

        Raises ChunkBulkMismatchError, before touching any column, when the
        sizes declared by `metas` do not cover `data` exactly.

        """
        for (chunk_x, chunk_z), bitmap, column_data in split_bulk(metas, data, sky_light_sent):
            self.add_column(chunk_x, chunk_z, column_data, bitmap, sky_light_sent, True)

    def load_light(self, chunk_x, chunk_z, data, sky_light_mask, block_light_mask,
                   empty_sky_light_mask=0, empty_block_light_mask=0):
        self.store.load_light((chunk_x, chunk_z), data, sky_light_mask, block_light_mask,
                              empty_sky_light_mask, empty_block_light_mask)

    def update_block_state(self, point, state):
        """ Apply a block delta. Deltas for columns that are not loaded are
        dropped; the column's full load will carry the change. Overlays at
        the position are discarded when the block type changes.

        """
        old = self.store.block_at(point)
        if old is None:
            logutil.log("BLOCK", f"ignoring update at {floored(point)}: column not loaded", level="DEBUG")
            return None
        self.store.set_block_state(point, state)
        new = self.store.block_at(point)
        if old.type != new.type:
            self.overlays.clear_at(point)
            new = self.store.block_at(point)
        logutil.log("BLOCK", f"{new.position} {old.name} -> {new.name}", level="DEBUG")
        self.emit_block_update(old, new)
        return new

    def emit_block_update(self, old, new):
        self.dispatch_event('on_block_update', old, new)
        position = old.position if old is not None else new.position
        for handler in list(self.block_watchers.get(position, ())):
            handler(old, new)

    def watch_block(self, position, handler):
        self.block_watchers.setdefault(floored(position), []).append(handler)

    def unwatch_block(self, position, handler):
        key = floored(position)
        handlers = self.block_watchers.get(key)
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            del self.block_watchers[key]

    def set_sign_text(self, point, lines):
        old = self.store.block_at(point)
        self.overlays.attach_sign(point, lines)
        new = self.store.block_at(point)
        if new is not None:
            self.emit_block_update(old, new)

    def add_block_entity(self, fields, point=None):
        if point is None:
            point = (fields['x'], fields['y'], fields['z'])
        self.overlays.attach_block_entity(point, fields)

    def add_painting(self, entity_id, position, title, direction_index):
        painting = Painting.from_direction_index(entity_id, position, title, direction_index)
        self.overlays.add_painting(painting)
        return painting

    def destroy_entities(self, entity_ids):
        for entity_id in entity_ids:
            painting = self.overlays.painting_by_id(entity_id)
            if painting is not None:
                self.overlays.remove_painting(painting)

    def set_dimension(self, dimension):
        """ Record the dimension the player is in. Moving to a different one
        throws away every column and overlay. Returns True on a change.

        """
        if dimension == self.dimension:
            return False
        logutil.log("WORLD", f"dimension {self.dimension!r} -> {dimension!r}, dropping {len(self.store)} columns")
        self.dimension = dimension
        self.store.clear()
        self.overlays.clear()
        return True

    def queue_server_message(self, message, data):
        self._server_outbox.append([message, data])

    def drain_server_outbox(self):
        messages = list(self._server_outbox)
        self._server_outbox.clear()
        return messages

    def update_sign(self, block, text):
        """ Ask the server to rewrite the sign at `block`.

        `text` is a string with one line per '\\n' or a sequence of lines.
        Raises SignTextError without sending anything if there are too many
        lines or a line is too long.

        """
        if isinstance(text, str):
            lines = text.split('\n')
        else:
            lines = [str(line) for line in text]
        max_lines = getattr(config, 'SIGN_MAX_LINES', 4)
        max_length = getattr(config, 'SIGN_MAX_LINE_LENGTH', 15)
        if len(lines) > max_lines:
            raise SignTextError(f'too many lines for sign text ({len(lines)}, max {max_lines})')
        for line in lines:
            if len(line) > max_length:
                raise SignTextError(f'signs have max line length {max_length}: {line!r}')
        lines += [''] * (max_lines - len(lines))
        data = {'location': block.position}
        for i, line in enumerate(lines):
            data['text%i' % (i + 1)] = line
        self.queue_server_message('update_sign', data)
        return data

    def handle_packet(self, msg, data):
        self.packets_handled += 1
        logutil.set_sequence(self.packets_handled)
        try:
            self._handle_packet(msg, data)
        finally:
            logutil.set_sequence(None)

    def _handle_packet(self, msg, data):
        if msg == 'map_chunk':
            self.add_column(
                data['x'],
                data['z'],
                data['chunk_data'],
                data['bit_map'],
                data.get('sky_light_sent'),
                data.get('ground_up', True),
                data.get('biomes'),
            )
            for fields in data.get('block_entities') or ():
                self.add_block_entity(fields)
            return
        if msg == 'map_chunk_bulk':
            self.add_columns_bulk(data['meta'], data['data'], data['sky_light_sent'])
            return
        if msg == 'unload_chunk':
            self.remove_column(data['x'], data['z'])
            return
        if msg == 'update_light':
            self.load_light(
                data['chunk_x'],
                data['chunk_z'],
                data.get('data'),
                data.get('sky_light_mask', 0),
                data.get('block_light_mask', 0),
                data.get('empty_sky_light_mask', 0),
                data.get('empty_block_light_mask', 0),
            )
            return
        if msg == 'block_change':
            self.update_block_state(_xyz(data['location']), data['type'])
            return
        if msg == 'multi_block_change':
            base_x = data['chunk_x'] * config.CHUNK_WIDTH
            base_z = data['chunk_z'] * config.CHUNK_WIDTH
            for record in data['records']:
                if 'horizontal_pos' in record:
                    block_x = (record['horizontal_pos'] >> 4) & 0x0f
                    block_z = record['horizontal_pos'] & 0x0f
                else:
                    block_x, block_z = record['x'], record['z']
                self.update_block_state((base_x + block_x, record['y'], base_z + block_z), record['block_id'])
            return
        if msg == 'explosion':
            source = _xyz(data)
            for offset in data.get('affected_block_offsets', ()):
                self.update_block_state(floored(vec_add(source, _xyz(offset))), 0)
            return
        if msg == 'spawn_entity_painting':
            self.add_painting(data['entity_id'], _xyz(data['location']), data['title'], data['direction'])
            return
        if msg == 'entity_destroy':
            self.destroy_entities(data['entity_ids'])
            return
        if msg == 'update_sign':
            lines = [data.get('text%i' % i) for i in range(1, 5)]
            self.set_sign_text(_xyz(data['location']), lines)
            return
        if msg == 'tile_entity_data':
            location = data.get('location')
            self.add_block_entity(data['nbt_data'], _xyz(location) if location is not None else None)
            return
        if msg in ('login', 'respawn'):
            self.set_dimension(data['dimension'])
            return
        logutil.log("WORLD", f"ignoring packet {msg}", level="DEBUG")


World.register_event_type('on_column_load')
World.register_event_type('on_column_unload')
World.register_event_type('on_block_update')
World.register_event_type('on_error')
