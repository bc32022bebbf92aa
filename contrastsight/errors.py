class ContrastSightError(Exception):
    """Base application error"""


class ConfigurationError(ContrastSightError):
    """Invalid option or unparseable colour; aborts the whole run"""


class DecodeError(ContrastSightError):
    """Image bytes or dimensions could not be obtained"""


class ExternalToolError(ContrastSightError):
    """A required external rasterizer/converter is missing or failed"""
