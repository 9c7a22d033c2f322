"""Calendar Hub: aggregates many calendars into one cached, time-windowed feed."""

__version__ = "0.1.0"
