"""Buffer per-step body states from a sample stream and export one trajectory document per run."""

__version__ = "0.1.0"
