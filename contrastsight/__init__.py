"""ContrastSight — WCAG non-text contrast audit for symbol artwork."""

__version__ = "0.1.0"
