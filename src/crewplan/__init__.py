"""Crewplan - capacity-aware weekly scheduling for engineering teams."""

__version__ = "0.1.0"
