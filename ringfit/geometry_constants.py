"""
Constants for landmark geometry.

This module contains the hand-skeleton indexing convention and the
empirical factors used when turning landmark spans into physical widths.
"""

# =============================================================================
# Hand Skeleton Indexing (21-point convention)
# =============================================================================

# Number of landmarks in a complete hand skeleton
NUM_HAND_LANDMARKS = 21

WRIST = 0

# Each finger has 4 landmarks: MCP (knuckle), PIP, DIP, TIP
FINGER_LANDMARKS = {
    "thumb": [1, 2, 3, 4],   # CMC, MCP, IP, TIP
    "index": [5, 6, 7, 8],
    "middle": [9, 10, 11, 12],
    "ring": [13, 14, 15, 16],
    "pinky": [17, 18, 19, 20],
}

INDEX_MCP = 5
MIDDLE_MCP = 9
RING_MCP = 13
RING_PIP = 14
PINKY_MCP = 17

# Palm span used for anatomical calibration (index MCP to pinky MCP)
PALM_INDEX = INDEX_MCP
PALM_PINKY = PINKY_MCP


# =============================================================================
# Finger Width Estimation Constants
# =============================================================================

# Knuckle-to-knuckle span overshoots true finger thickness
KNUCKLE_TO_WIDTH_FACTOR = 0.8

# Plausible adult ring-finger diameter range (mm)
MIN_DIAMETER_MM = 14.0
MAX_DIAMETER_MM = 22.2

# Sentinel for "no usable measurement this frame"
NO_MEASUREMENT = 0.0


# =============================================================================
# Rotation Constants
# =============================================================================

# Overlay rotation range; a ring band is symmetric under 180 degree turns
ROTATION_LIMIT_DEG = 90.0

# Direction of an upright finger (pointing to the top of the frame) in
# image coordinates, where y grows downwards
UPRIGHT_FINGER_ANGLE_DEG = -90.0
