"""wax_trigger - resumable polling trigger for WAX blockchain events."""

__version__ = "0.1.0"
