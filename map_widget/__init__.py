"""Map field widget.

Interactive geometry-editing control for content-editing hosts. Renders a
map surface, lets the user draw or reshape a single Point, LineString or
Polygon, and hands the result back to the host as GeoJSON geometry text.
"""

__version__ = "0.1.0"
