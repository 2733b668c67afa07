"""Functions available to the Elevated (root) level only."""
