"""HTTP API for the American Adages Society."""
