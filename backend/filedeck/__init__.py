"""FileDeck — remote device file browser and transfer engine."""

__version__ = "0.1.0"
