"""
charon.core: plumbing shared by every other package:
errors, structured logging, configuration and version metadata.
"""

from .errors import CharonError, ErrorCode
from .version import __version__

__all__ = ["CharonError", "ErrorCode", "__version__"]
