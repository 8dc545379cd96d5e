# Size of chunk columns streamed from the server.
CHUNK_WIDTH = 16 #width and depth (x and z)
CHUNK_HEIGHT = 256 #height of world (y)
SECTION_HEIGHT = 16 #height of one vertical section inside a column
SECTIONS_PER_CHUNK = CHUNK_HEIGHT // SECTION_HEIGHT

# Bytes in one section of column data: 2 bytes per block state, half a byte per light value.
SECTION_BLOCKS = CHUNK_WIDTH * SECTION_HEIGHT * CHUNK_WIDTH
SECTION_STATE_BYTES = SECTION_BLOCKS * 2
SECTION_LIGHT_BYTES = SECTION_BLOCKS // 2
BIOME_BYTES = CHUNK_WIDTH * CHUNK_WIDTH

# Block search defaults.
FIND_BLOCK_DEFAULT_DISTANCE = 16

# Line of sight sampling (samples per block of ray length).
SIGHT_SAMPLES_PER_BLOCK = 5

# Outbound sign edits.
SIGN_MAX_LINES = 4
SIGN_MAX_LINE_LENGTH = 15

# Dimensions that ship sky light with their column data.
SKYLIGHT_DIMENSIONS = (0, 'overworld', 'minecraft:overworld')

# Enable ANSI colors in logs.
LOG_COLOR = True

# Level for the blockmirror logger (None leaves it alone).
LOG_LEVEL = None

# Log every applied block delta (noisy).
LOG_BLOCK_UPDATES = False

# Log column load/unload.
LOG_COLUMN_LOADS = True
