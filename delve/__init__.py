"""
project: Delve
module: __init__.py
License: MIT

Turn-based dungeon-crawl simulation engine.

The package is split the same way the game loop runs:

* ``delve.dungeon``  - grid, terrain and procedural level generation.
* ``delve.services`` - field of view, pathfinding, combat, monster AI and the
  turn scheduler that ties them together.
* ``delve.models``   - entity store, intents, the ``GameState`` aggregate and
  the immutable frame snapshots handed to whatever draws the game.

Nothing here draws, polls devices or touches the network; presentation layers
feed intents in and receive ``FrameSnapshot`` objects out.
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
