import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from blocks import BLOCK_ID, state_id
from chat import ChatMessage
from column import ChunkColumn
from overlays import OverlayIndex, Painting, sign_line, sign_text
from world import World

SIGN = state_id(BLOCK_ID['standing_sign'])
STONE = state_id(BLOCK_ID['stone'])


def _world_with_column(blocks=()):
    world = World()
    column = ChunkColumn()
    column.blocks[:, 0, :] = state_id(BLOCK_ID['bedrock'])
    for pos, state in blocks:
        column.set_block_state_id(pos, state)
    data, bitmap = column.dump()
    world.add_column(0, 0, data, bitmap, sky_light_sent=True)
    return world


def _sign_fields(x, y, z, lines):
    fields = {'id': 'minecraft:sign', 'x': x, 'y': y, 'z': z}
    for i, line in enumerate(lines):
        fields['Text%i' % (i + 1)] = line
    return fields


def test_chat_message_plain_text():
    assert ChatMessage('plain').to_string() == 'plain'
    assert str(ChatMessage({'text': 'a', 'extra': [{'text': 'b'}, 'c']})) == 'abc'
    assert ChatMessage({'translate': 'sign.hello', 'with': ['bob']}).to_string() == 'sign.hello bob'
    assert ChatMessage.from_json('["x", {"text": "y"}]').to_string() == 'xy'


def test_sign_line_forms():
    assert sign_line('') == ''
    assert sign_line(None) == ''
    assert sign_line('null') == ''
    assert sign_line('""') == ''
    assert sign_line('{"text":"hello"}') == 'hello'
    assert sign_line('{"text":"\\"quoted\\""}') == 'quoted'
    assert sign_line('legacy text') == 'legacy text'
    assert sign_line('{"text":"\\"\\"twice\\"\\""}') == '"twice"'
    assert sign_text(['{"text":"one"}', 'two']) == 'one\ntwo\n\n'


def test_block_entity_sign_text():
    world = _world_with_column([((2, 5, 3), SIGN)])
    fields = _sign_fields(2, 5, 3, ['{"text":"hello"}', '', '"quoted"',
                                    '{"text":"a","extra":[{"text":"b"}]}'])
    world.handle_packet('tile_entity_data', {'nbt_data': fields})
    block = world.block_at((2.5, 5.9, 3.1))
    assert block.sign_text == 'hello\n\nquoted\nab'
    assert block.block_entity is fields


def test_non_sign_block_entity_has_no_text():
    overlays = OverlayIndex()
    overlays.attach_block_entity((1, 2, 3), {'id': 'Chest', 'Items': []})
    assert overlays.block_entity_at((1.2, 2.2, 3.2))['id'] == 'Chest'
    assert overlays.sign_at((1, 2, 3)) is None


def test_type_change_clears_sign():
    world = _world_with_column([((2, 5, 3), SIGN)])
    world.add_block_entity(_sign_fields(2, 5, 3, ['{"text":"x"}', '', '', '']))
    new = world.update_block_state((2, 5, 3), STONE)
    assert new.sign_text is None
    assert new.block_entity is None
    assert world.overlays.sign_at((2, 5, 3)) is None
    assert world.overlays.block_entity_at((2, 5, 3)) is None


def test_same_type_change_keeps_sign():
    world = _world_with_column([((2, 5, 3), SIGN)])
    world.add_block_entity(_sign_fields(2, 5, 3, ['{"text":"keep"}', '', '', '']))
    new = world.update_block_state((2, 5, 3), state_id(BLOCK_ID['standing_sign'], 4))
    assert new.metadata == 4
    assert new.sign_text == 'keep\n\n\n'


def test_update_sign_packet_emits_update():
    world = _world_with_column([((7, 1, 7), SIGN)])
    updates = []
    world.push_handlers(on_block_update=lambda old, new: updates.append((old, new)))
    world.handle_packet('update_sign', {
        'location': {'x': 7, 'y': 1, 'z': 7},
        'text1': '{"text":"line one"}',
        'text2': 'null',
        'text3': '',
        'text4': '{"text":"four"}',
    })
    assert world.block_at((7, 1, 7)).sign_text == 'line one\n\n\nfour'
    assert len(updates) == 1
    old, new = updates[0]
    assert old.sign_text is None
    assert new.sign_text == 'line one\n\n\nfour'


def test_paintings_indexed_by_id_and_position():
    world = _world_with_column()
    world.handle_packet('spawn_entity_painting', {
        'entity_id': 42, 'location': (4, 10, 4), 'title': 'Kebab', 'direction': 1,
    })
    painting = world.block_at((4.5, 10.5, 4.5)).painting
    assert painting.title == 'Kebab'
    assert painting.direction == (-1, 0, 0)
    assert world.overlays.painting_by_id(42) is painting

    world.handle_packet('entity_destroy', {'entity_ids': [7, 42]})
    assert world.block_at((4, 10, 4)).painting is None
    assert world.overlays.paintings_by_id == {}
    assert world.overlays.paintings_by_position == {}


def test_type_change_removes_painting_from_both_indices():
    world = _world_with_column()
    world.add_painting(9, (1, 3, 1), 'Wasteland', 0)
    world.update_block_state((1, 3, 1), STONE)
    assert world.overlays.painting_by_id(9) is None
    assert world.overlays.painting_at((1, 3, 1)) is None


def test_respawned_painting_moves():
    overlays = OverlayIndex()
    first = Painting(1, (0, 0, 0), 'A', (0, 0, 1))
    moved = Painting(1, (5, 5, 5), 'A', (0, 0, 1))
    overlays.add_painting(first)
    overlays.add_painting(moved)
    assert overlays.painting_at((0, 0, 0)) is None
    assert overlays.painting_at((5, 5, 5)) is moved


def test_clear_at_only_touches_its_position():
    overlays = OverlayIndex()
    overlays.attach_sign((1, 1, 1), ['a'])
    overlays.attach_sign((1, 1, 2), ['b'])
    overlays.clear_at((1.5, 1.5, 1.5))
    assert overlays.sign_at((1, 1, 1)) is None
    assert overlays.sign_at((1, 1, 2)) == 'b\n\n\n'


def test_painting_direction_out_of_range():
    assert Painting.from_direction_index(1, (0, 0, 0), 'A', 3).direction == (1, 0, 0)
    with pytest.raises(ValueError):
        Painting.from_direction_index(1, (0, 0, 0), 'A', -1)
    with pytest.raises(ValueError):
        Painting.from_direction_index(1, (0, 0, 0), 'A', 4)
