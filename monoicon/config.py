# config.py
"""
Configuration constants for monoicon.

The heuristic thresholds are empirically tuned values. They are kept here so
they can be recalibrated without touching the algorithms that read them.
"""

from PIL import Image

# Cache capacities
MAX_RAW_ICON_CACHE = 50
MAX_MONOCHROME_CACHE = 100
MAX_FIT_CACHE = 80
MAX_DESCRIPTOR_CACHE = 100
MAX_PACKAGE_ICON_CACHE = 200
CACHE_EVICTION_FRACTION = 4  # Evict max_size // 4 entries when full

# Colour saturation detection
SATURATION_GRID_DIVISOR = 12
SATURATION_MIN_ALPHA = 50
SATURATION_THRESHOLD = 0.2
COLORED_FRACTION_THRESHOLD = 0.3

# Transparency detection
TRANSPARENCY_GRID_DIVISOR = 16
TRANSPARENT_ALPHA_BELOW = 200
TRANSPARENT_EDGE_FRACTION = 0.10

# Background estimation
BACKGROUND_SAMPLES_PER_EDGE = 10

# Background subtraction silhouette
MIN_BACKGROUND_DISTANCE = 15.0
SILHOUETTE_GAMMA = 0.7

# Luminance fallback
LUMINANCE_MIDPOINT = 128
LUMINANCE_ALPHA_GAIN = 2

# Silhouette quality gate
QUALITY_GRID_DIVISOR = 8
QUALITY_OPAQUE_ALPHA = 200
QUALITY_TRANSPARENT_ALPHA = 30
QUALITY_MAX_OPAQUE_FRACTION = 0.80
QUALITY_MAX_TRANSPARENT_FRACTION = 0.90

# Fitting
FIT_RESAMPLE = Image.Resampling.LANCZOS

# Supported image formats for file processing
SUPPORTED_IMAGE_FORMATS = ['png', 'webp', 'bmp', 'gif', 'tiff', 'jpg', 'jpeg']
MAX_IMAGE_DIMENSION = 1024  # Icons larger than this are rejected

# Performance monitor settings
MEMORY_THRESHOLD_BYTES = 256 << 20  # 256 MB
MEMORY_CLEANUP_INTERVAL_SECS = 300  # 5 minutes in seconds
MEMORY_CHECK_INTERVAL_SECS = 60

# Logging
LOGGER_NAME = "monoicon"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
