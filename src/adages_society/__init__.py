"""American Adages Society API."""
