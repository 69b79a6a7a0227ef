"""BandScrape: random-ID track discovery and a central collector for the results."""

__version__ = "1.0.0"
