"""
esristyle - Translate ArcGIS service symbology into vendor-neutral styles.

This package provides tools for working with ArcGIS REST ``drawingInfo`` documents:
- Reading ESRI symbols (markers, lines, fills, pictures, text) into normalized descriptors
- Translating simple, unique-value and class-breaks renderers into ordered style rules
- Selecting the style and label of a feature for a given map resolution
- A small CLI to inspect and export translated styles
"""

__docformat__ = 'numpy'

from esristyle._version import __version__

from esristyle import config, symbology, utils


__all__ = [
    "__version__",
    "config",
    "symbology",
    "utils",
]

__license__ = "BSD-3"
