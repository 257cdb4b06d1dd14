__version__ = "1.0.0"
__release_date__ = "2026-10-19"
__version_label__ = f"{__version__} ({__release_date__})"
