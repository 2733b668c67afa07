"""
Rootine — privilege-aware host automation.

Resolves a command name to a library function or command script,
binds its arguments against a declarative schema, and serializes
package-manager access across concurrent invocations.
"""

__version__ = "1.0.0"
