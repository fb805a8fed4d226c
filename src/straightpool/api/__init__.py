"""HTTP API for StraightPool."""
