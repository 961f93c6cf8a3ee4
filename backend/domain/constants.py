"""
Game constants for SnakeNeon.
"""

# Movement directions as (dx, dy) unit vectors; y grows downward
UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

DIRECTION_NAMES = {
    "UP": UP,
    "DOWN": DOWN,
    "LEFT": LEFT,
    "RIGHT": RIGHT,
}

# Game settings
FOOD_SCORE = 10
INITIAL_SNAKE_LENGTH = 3
OBSTACLE_RATIO = 0.6

# Board sizes (cells per side)
DESKTOP_TILE_COUNT = 30
MOBILE_TILE_COUNT = 24

# Rejection sampling tries before falling back to the free-cell list
MAX_PLACEMENT_ATTEMPTS = 1000

# Persisted settings keys
BEST_SCORE_KEY = "snakeBestScore"
MUTED_KEY = "snakeMuted"
