"""Functions available to the Standard (user) level only."""
