from __future__ import annotations


class TrellisError(Exception):
    """Base class for errors raised by trellis packages."""
