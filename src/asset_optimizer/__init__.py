"""asset-optimizer: mirror a static asset tree with optimized media."""

__version__ = "0.1.0"
