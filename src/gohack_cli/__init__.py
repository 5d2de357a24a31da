"""gohack command line interface."""
