"""Configuration, data fetching and text layout for a dashboard of GitHub pull requests and issues."""

__version__ = "0.1.0"