"""
Gameplay constants shared by the records and the default scenario.
"""

MELEE_ATTACK_RANGE = 50

ARENA_WIDTH = 650
ARENA_HEIGHT = 550

# Row stride used to turn a position into an arena tree key
ARENA_MERKLE_ROW_WIDTH = 800

DIE_FACES = 6
