import numpy

# Block-state ids pack the block type in the high 12 bits and a 4-bit variant.
STATE_TYPE_SHIFT = 4
STATE_DATA_MASK = 0x0f
MAX_BLOCK_TYPES = 1 << (16 - STATE_TYPE_SHIFT)


class BlockType(object):
    id = None
    name = None
    # Bounding volume: 'block' occupies space and stops sight lines, 'empty' does not.
    bounding_box = 'block'

class EmptyBlock(BlockType):
    bounding_box = 'empty'

class Air(EmptyBlock):
    id = 0
    name = 'air'

class Stone(BlockType):
    id = 1
    name = 'stone'

class Grass(BlockType):
    id = 2
    name = 'grass'

class Dirt(BlockType):
    id = 3
    name = 'dirt'

class Cobblestone(BlockType):
    id = 4
    name = 'cobblestone'

class Planks(BlockType):
    id = 5
    name = 'planks'

class Sapling(EmptyBlock):
    id = 6
    name = 'sapling'

class Bedrock(BlockType):
    id = 7
    name = 'bedrock'

class FlowingWater(EmptyBlock):
    id = 8
    name = 'flowing_water'

class Water(EmptyBlock):
    id = 9
    name = 'water'

class FlowingLava(EmptyBlock):
    id = 10
    name = 'flowing_lava'

class Lava(EmptyBlock):
    id = 11
    name = 'lava'

class Sand(BlockType):
    id = 12
    name = 'sand'

class Gravel(BlockType):
    id = 13
    name = 'gravel'

class GoldOre(BlockType):
    id = 14
    name = 'gold_ore'

class IronOre(BlockType):
    id = 15
    name = 'iron_ore'

class CoalOre(BlockType):
    id = 16
    name = 'coal_ore'

class Log(BlockType):
    id = 17
    name = 'log'

class Leaves(BlockType):
    id = 18
    name = 'leaves'

class Glass(BlockType):
    id = 20
    name = 'glass'

class TallGrass(EmptyBlock):
    id = 31
    name = 'tallgrass'

class YellowFlower(EmptyBlock):
    id = 37
    name = 'yellow_flower'

class RedFlower(EmptyBlock):
    id = 38
    name = 'red_flower'

class Torch(EmptyBlock):
    id = 50
    name = 'torch'

class Chest(BlockType):
    id = 54
    name = 'chest'

class DiamondOre(BlockType):
    id = 56
    name = 'diamond_ore'

class CraftingTable(BlockType):
    id = 58
    name = 'crafting_table'

class Furnace(BlockType):
    id = 61
    name = 'furnace'

class StandingSign(EmptyBlock):
    id = 63
    name = 'standing_sign'

class WoodenDoor(EmptyBlock):
    id = 64
    name = 'wooden_door'

class Ladder(EmptyBlock):
    id = 65
    name = 'ladder'

class WallSign(EmptyBlock):
    id = 68
    name = 'wall_sign'

class SnowLayer(EmptyBlock):
    id = 78
    name = 'snow_layer'

class Ice(BlockType):
    id = 79
    name = 'ice'

class Pumpkin(BlockType):
    id = 86
    name = 'pumpkin'

class LitPumpkin(BlockType):
    id = 91
    name = 'lit_pumpkin'

BLOCKS = [
    Air,
    Stone,
    Grass,
    Dirt,
    Cobblestone,
    Planks,
    Sapling,
    Bedrock,
    FlowingWater,
    Water,
    FlowingLava,
    Lava,
    Sand,
    Gravel,
    GoldOre,
    IronOre,
    CoalOre,
    Log,
    Leaves,
    Glass,
    TallGrass,
    YellowFlower,
    RedFlower,
    Torch,
    Chest,
    DiamondOre,
    CraftingTable,
    Furnace,
    StandingSign,
    WoodenDoor,
    Ladder,
    WallSign,
    SnowLayer,
    Ice,
    Pumpkin,
    LitPumpkin,
]
BLOCK_ID = {}
BLOCK_TYPES = {}
for x in BLOCKS:
    BLOCK_ID[x.name] = x.id
    BLOCK_TYPES[x.id] = x

# Type ids the registry does not know about are treated as full blocks.
BLOCK_SOLID = numpy.ones(MAX_BLOCK_TYPES, dtype=numpy.uint8)
for x in BLOCKS:
    BLOCK_SOLID[x.id] = x.bounding_box != 'empty'


def state_id(type_id, data=0):
    return (type_id << STATE_TYPE_SHIFT) | (data & STATE_DATA_MASK)


def state_type(state):
    return int(state) >> STATE_TYPE_SHIFT


def state_data(state):
    return int(state) & STATE_DATA_MASK


def block_name(type_id):
    block = BLOCK_TYPES.get(type_id)
    if block is None:
        return 'unknown_%i' % type_id
    return block.name


def bounding_box(type_id):
    return 'block' if BLOCK_SOLID[type_id] else 'empty'
