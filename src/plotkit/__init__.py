"""plotkit: layered, plot-ready vector drawings from GeoJSON and 3D scenes."""

__version__ = "0.1.0"
