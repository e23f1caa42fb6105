"""
Guess-the-Number Round Engine
Core engine without web framework, database, or UI
"""

GUESS_MIN = 0
GUESS_MAX = 100

# A fresh game holds this target until the first reset draws a real one.
SENTINEL_TARGET = 0
