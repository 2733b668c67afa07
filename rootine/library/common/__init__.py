"""Functions available at every privilege level."""
