"""Commands available to the Standard (user) level."""
