import math

from config import CHUNK_WIDTH, CHUNK_HEIGHT

# Facing vectors for painting direction indices 0..3 (south, west, north, east)
PAINTING_FACES = [
    ( 0, 0,-1),
    (-1, 0, 0),
    ( 0, 0, 1),
    ( 1, 0, 0),
]

CHUNK_EXTENT = (CHUNK_WIDTH, CHUNK_HEIGHT, CHUNK_WIDTH)


def floored(position):
    """ Accepts `position` of arbitrary precision and returns the block
    containing that position.

    Parameters
    ----------
    position : tuple of len 3

    Returns
    -------
    block_position : tuple of ints of len 3

    """
    x, y, z = position
    return (int(math.floor(x)), int(math.floor(y)), int(math.floor(z)))


def column_key(x, z):
    """ Returns the (chunk_x, chunk_z) key of the column holding the
    absolute horizontal coordinate (`x`, `z`).

    """
    return (int(math.floor(x)) // CHUNK_WIDTH, int(math.floor(z)) // CHUNK_WIDTH)


def column_key_for(position):
    x, _, z = position
    return column_key(x, z)


def column_corner(key):
    """ Returns the world position of the lowest corner of the column `key`.

    """
    chunk_x, chunk_z = key
    return (chunk_x * CHUNK_WIDTH, 0, chunk_z * CHUNK_WIDTH)


def local_position(position):
    """ Returns the in-column coordinate of `position`.

    The position is floored first, then each axis is taken modulo the
    column extent, so the result is always non-negative.

    """
    x, y, z = floored(position)
    return (x % CHUNK_EXTENT[0], y % CHUNK_EXTENT[1], z % CHUNK_EXTENT[2])


def ones_in_short(n):
    return bin(n & 0xffff).count('1')


def vec_add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vec_sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_length(v):
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
