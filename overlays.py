'''
overlays.py -- data layered on top of the block grid: sign text, block entity
fields and paintings, all keyed by floored block position.
'''

import json

from chat import ChatMessage
from util import floored, PAINTING_FACES
import logutil

SIGN_ENTITY_IDS = ('minecraft:sign', 'Sign')
SIGN_LINES = 4


class Painting(object):
    def __init__(self, id, position, title, direction):
        self.id = id
        self.position = floored(position)
        self.title = title
        self.direction = direction

    @classmethod
    def from_direction_index(cls, id, position, title, direction_index):
        if not 0 <= direction_index < len(PAINTING_FACES):
            raise ValueError('painting direction must be 0..%i, got %r' % (len(PAINTING_FACES) - 1, direction_index))
        return cls(id, position, title, PAINTING_FACES[direction_index])

    def __repr__(self):
        return 'Painting(%r, %r, %r)' % (self.id, self.position, self.title)


def is_sign_entity(fields):
    return fields.get('id') in SIGN_ENTITY_IDS


def _strip_quotes(text):
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def sign_line(raw):
    """ Render one raw sign line (a JSON chat component, or legacy plain
    text) to a plain string. Empty and null lines render as ''.

    """
    if raw is None or raw == '' or raw == 'null':
        return ''
    if isinstance(raw, ChatMessage):
        return raw.to_string()
    if isinstance(raw, dict):
        message = dict(raw)
    elif isinstance(raw, str):
        try:
            message = json.loads(raw)
        except ValueError:
            return raw
    else:
        message = raw
    if isinstance(message, dict) and isinstance(message.get('text'), str):
        message['text'] = _strip_quotes(message['text'])
    return ChatMessage(message).to_string()


def sign_text(lines):
    lines = list(lines)[:SIGN_LINES]
    lines += [''] * (SIGN_LINES - len(lines))
    return '\n'.join(sign_line(l) for l in lines)


class OverlayIndex(object):
    def __init__(self):
        self.signs = {}
        self.block_entities = {}
        self.paintings_by_id = {}
        self.paintings_by_position = {}

    def attach_block_entity(self, point, fields):
        key = floored(point)
        if is_sign_entity(fields):
            self.signs[key] = sign_text(fields.get('Text%i' % i) for i in range(1, SIGN_LINES + 1))
        self.block_entities[key] = fields

    def attach_sign(self, point, lines):
        self.signs[floored(point)] = sign_text(lines)

    def add_painting(self, painting):
        old = self.paintings_by_id.get(painting.id)
        if old is not None:
            self.remove_painting(old)
        self.paintings_by_id[painting.id] = painting
        self.paintings_by_position[painting.position] = painting

    def remove_painting(self, painting):
        self.paintings_by_id.pop(painting.id, None)
        if self.paintings_by_position.get(painting.position) is painting:
            del self.paintings_by_position[painting.position]

    def painting_by_id(self, id):
        return self.paintings_by_id.get(id)

    def sign_at(self, point):
        return self.signs.get(floored(point))

    def block_entity_at(self, point):
        return self.block_entities.get(floored(point))

    def painting_at(self, point):
        return self.paintings_by_position.get(floored(point))

    def clear_at(self, point):
        key = floored(point)
        self.block_entities.pop(key, None)
        self.signs.pop(key, None)
        painting = self.paintings_by_position.get(key)
        if painting is not None:
            self.remove_painting(painting)

    def clear(self):
        logutil.log("OVERLAY", "dropping %i signs, %i block entities, %i paintings"
                    % (len(self.signs), len(self.block_entities), len(self.paintings_by_id)), level="DEBUG")
        self.signs = {}
        self.block_entities = {}
        self.paintings_by_id = {}
        self.paintings_by_position = {}
