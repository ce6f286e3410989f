"""GeoTrail - live GPS path accumulation and scale-to-fit rendering."""

__version__ = "0.1.0"
