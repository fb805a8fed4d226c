"""StraightPool: two-player pocket-billiards match scoring."""

__version__ = "0.1.0"
