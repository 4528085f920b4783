"""NS journey planner with via-station combination search."""

__version__ = "0.1.0"
