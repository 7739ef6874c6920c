"""cmsweep - find and remove unused Kubernetes ConfigMaps."""

__version__ = "0.1.0"
