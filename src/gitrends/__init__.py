"""gitrends: mine git history into Parquet tables and analyze how code evolves."""

__version__ = "0.1.0"
