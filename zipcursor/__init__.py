"""Read ZIP archives from seekable files, in-memory bytes or one-way streams."""

__version__ = "0.1.0"