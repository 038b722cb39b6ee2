"""
Layout and metric constants for PDF rendering.
"""

# Page geometry (A4, points)
PAGE_W, PAGE_H = 595, 842

# Metrics used when no TrueType font is available for measurement (fractions of the font size)
FALLBACK_CHAR_WIDTH = 0.52
FALLBACK_LINE_HEIGHT = 1.15

# Text decorations (fractions of the font size)
UNDERLINE_OFFSET = 0.12
STRIKEOUT_OFFSET = 0.3
DECORATION_THICKNESS = 0.06

# Images without dpi information are placed at one pixel per point
DEFAULT_IMAGE_DPI = 72.0
