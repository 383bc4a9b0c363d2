"""
Puzzle game-completion settlement engine

Computes coin/XP rewards for finished puzzles, folds XP into the level
curve, unlocks achievements and persists the result exactly once per game.
"""

__version__ = "1.0.0"
