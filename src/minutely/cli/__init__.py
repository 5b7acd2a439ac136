"""Command line interface for minutely (``minutely --help``)."""
