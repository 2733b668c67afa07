"""
Library namespaces.

``common`` is loaded for everyone; ``root`` only for the Elevated level
and ``user`` only for the Standard level. Each module lists its
callable API in ``__all__``; that list is what the loader registers.
"""
