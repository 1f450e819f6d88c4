"""
Colorblind Theme — a color-blind friendly theme plugin together with the
small host it runs in: project lifecycle, per-project services, message
bundles and plugin loading.
"""

__version__ = "1.0.0"
