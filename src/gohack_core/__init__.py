"""Building blocks of gohack: go.mod editing, VCS backends, directory hashing."""

__version__ = "0.1.0"
