# Scoring table (points per cleared candy and per special created).
BASE_POINTS_PER_CANDY = 60
CASCADE_MULTIPLIER_STEP = 0.5
STRIPED_CREATION_BONUS = 120
WRAPPED_CREATION_BONUS = 200
COLOR_BOMB_CREATION_BONUS = 200

# Board rules
MIN_MATCH_LENGTH = 3
STRIPED_MATCH_LENGTH = 4
COLOR_BOMB_MATCH_LENGTH = 5
WRAPPED_RADIUS = 1          # 3x3 blast
WRAPPED_COMBO_RADIUS = 2    # 5x5 blast for wrapped + wrapped
STRIPED_WRAPPED_BAND = 1    # midpoint row/col +-1

# Level defaults
DEFAULT_COLOR_POOL_SIZE = 5
STAR_COUNT = 3

# Display names for color ids, in id order. Level files may use these names
# for collect-colors targets.
COLOR_NAMES = ("ruby", "sapphire", "emerald", "topaz", "amethyst", "amber")

HORIZONTAL = "horizontal"
VERTICAL = "vertical"

# Upper bound on resolution steps for one cycle. Only tiny color pools can
# keep refilling into matches this long.
MAX_CASCADE_STEPS = 200
