"""
DropJack Package
================

A falling-card puzzle: cards drop onto a grid, and connected cards whose
blackjack values add up to exactly 21 are cleared. Gravity closes the gaps
and may set off further clears (cascades).

The game engine lives in dropjack.core. Tunable parameters are in
game_config.yaml.
"""

__version__ = "0.1.0"
