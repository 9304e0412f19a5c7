"""Multi-service booking chain resolver: bookable times and worker assignment for salon chains."""

__version__ = "0.1.0"
