"""Quake Monitor - seismic activity dashboard backed by the USGS feed."""

__version__ = "1.0.0"
