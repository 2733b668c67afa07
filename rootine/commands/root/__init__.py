"""Commands available to the Elevated (root) level."""
