"""IPP network printer discovery and job submission."""

__version__ = "1.0.0"
