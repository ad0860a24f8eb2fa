"""Point-cloud voxelling building blocks and a client for the untwine tiler program."""

__version__ = "0.1.0"