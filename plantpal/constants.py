"""
Shared constants used across the application.

This module contains constants that need to be consistent across
different parts of the application (forms, templates, validation, etc.).
"""

# Sunlight options offered by the add-plant form (free text is still accepted)
SUNLIGHT_OPTIONS = [
    "Bright indirect",
    "Direct sunlight",
    "Low light",
]
DEFAULT_SUNLIGHT = "Bright indirect"

DEFAULT_TYPE = "unknown"
DEFAULT_WATERING_FREQUENCY = 7
# Longer intervals are clamped so schedule dates stay inside the calendar range
MAX_WATERING_FREQUENCY = 3650
UNNAMED_PLANT = "Unnamed"

# Royalty-free sample images keyed by lowercase plant type
SAMPLE_IMAGES = {
    "succulent": "https://images.unsplash.com/photo-1524592831667-2b2d1b1f3b76?auto=format&fit=crop&w=800&q=60",
    "fern": "https://images.unsplash.com/photo-1501004318641-b39e6451bec6?auto=format&fit=crop&w=800&q=60",
    "monstera": "https://images.unsplash.com/photo-1535905748047-14a1d3a7a9d8?auto=format&fit=crop&w=800&q=60",
    "fiddle": "https://images.unsplash.com/photo-1536104968055-4d61aa56cc07?auto=format&fit=crop&w=800&q=60",
    "default": "https://images.unsplash.com/photo-1441974231531-c6227db76b6e?auto=format&fit=crop&w=800&q=60",
}

# Key-value store keys (kept identical to the browser version so snapshots carry over)
PLANTS_KEY = "plantpal_plants_v1"
THEME_KEY = "plantpal_theme_v1"

THEMES = ("light", "dark")
DEFAULT_THEME = "light"

# Sort modes: (value, label) pairs for the sort selector
SORT_MODES = [
    ("nextWatering", "Sort: next watering"),
    ("name", "Sort: name"),
    ("createdAt", "Sort: newest"),
]
DEFAULT_SORT = "nextWatering"
ALL_TYPES = "all"

IMPORT_CAP = 500
EXPORT_FILENAME = "plantpal_export.json"
