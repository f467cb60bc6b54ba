GRID_ROWS = 12
GRID_COLS = 6

# Column every player piece enters from.
SPAWN_COLUMN = 2
# Number of cells the generator hands out per round.
PIECE_SIZE = 2

# Drop speeds are measured in grid rows per second.
NORMAL_SPEED = 2.0
DROP_SPEED = 12.0

# Seconds before another horizontal move / rotation is accepted.
MOVE_DELAY = 0.2
ROTATION_DELAY = 0.1

# Extra counter cells sent to opponents after an all clear.
ALL_CLEAR_BONUS = 6

# Window layout for the arcade shell.
WINDOW_WIDTH = 960
WINDOW_HEIGHT = 640
BOTTOM_MARGIN = 40
TOP_MARGIN = 48
SIDE_GAP = 40
MIN_CELL_SIZE = 8
CELL_PADDING = 2
