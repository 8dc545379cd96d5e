'''
search.py -- read-only queries over the loaded world: sampled line of sight and
brute force block search. Both take a `block_at(point)` callable returning a
Block or None.
'''

import math
import numbers

import config
from util import floored, vec_add, vec_sub, vec_length


class Predicate(object):
    """ Matches blocks for which `fn(block)` is true. `fn` also sees None
    for positions that are not loaded. """
    def __init__(self, fn):
        self.fn = fn

    def __call__(self, block):
        return bool(self.fn(block))


class TypeSet(object):
    """ Matches loaded blocks whose type id is one of `type_ids`. """
    def __init__(self, type_ids):
        self.type_ids = frozenset(int(t) for t in type_ids)

    def __call__(self, block):
        return block is not None and block.type in self.type_ids


def as_matcher(matching):
    if isinstance(matching, (Predicate, TypeSet)):
        return matching
    if callable(matching):
        return Predicate(matching)
    if isinstance(matching, numbers.Integral):
        return TypeSet((matching,))
    return TypeSet(matching)


def block_is_not_empty(block_at, point):
    block = block_at(point)
    return block is not None and block.bounding_box != 'empty'


def visible_position(block_at, a, b):
    """ Walk from `a` towards `b` in steps of 1/SIGHT_SAMPLES_PER_BLOCK and
    report whether every cell entered along the way is empty or unknown.

    Parameters
    ----------
    block_at : callable
        Maps a point to a Block or None.
    a, b : tuple of len 3
        Start and end points.

    """
    v = vec_sub(b, a)
    u = vec_length(v) * getattr(config, 'SIGHT_SAMPLES_PER_BLOCK', 5)
    if u == 0:
        return True
    step = (v[0] / u, v[1] / u, v[2] / u)
    previous = floored(a)
    i = 1
    while i < u:
        a = vec_add(a, step)
        cell = floored(a)
        # consecutive samples in the same cell are tested once
        if cell != previous and block_is_not_empty(block_at, cell):
            return False
        previous = cell
        i += 1
    return True


def find_block(block_at, point, matching, max_distance=None):
    """ Return the first block matching `matching` in the cube of half-width
    `max_distance` around `point`, scanning x, then y, then z, or None.

    `matching` is a Predicate, a TypeSet, a callable, a type id or an
    iterable of type ids.

    """
    if max_distance is None:
        max_distance = getattr(config, 'FIND_BLOCK_DEFAULT_DISTANCE', 16)
    check = as_matcher(matching)
    max_distance = int(math.ceil(max_distance))
    px, py, pz = floored(point)
    for x in range(px - max_distance, px + max_distance):
        for y in range(py - max_distance, py + max_distance):
            for z in range(pz - max_distance, pz + max_distance):
                found = block_at((x, y, z))
                if check(found):
                    return found
    return None
