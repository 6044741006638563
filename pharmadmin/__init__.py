"""Administrative tooling for the pharmacy inventory backend."""

__version__ = "0.1.0"
