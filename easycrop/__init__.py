"""
EasyCrop - Classic, freehand and lasso image cropping.

This package contains the main application modules:
- core: Crop engine, region builders, raster operations and app wiring
- ui: User interface components
- services: Application services (config, logging)
"""

__version__ = "0.1.0"
