"""FocusMove — work/break interval timer with mandatory mobility breaks."""

__version__ = "0.1.0"
