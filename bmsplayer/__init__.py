"""Chart model, BMSON loading, note timing, scores and dan course tracking for BMS rhythm games."""

__version__ = "0.1.0"