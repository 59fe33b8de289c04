"""Personal task tracker: in-memory task store with undo, recurrence and flat-file persistence."""

__version__ = "0.1.0"
