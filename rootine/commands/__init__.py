"""
Command scripts, one module per command, grouped by privilege level.

A module named ``install_nodejs`` is invoked as ``install-nodejs``. It
declares ``ARGUMENTS`` (an ``ArgumentSchema``) and a
``main(context) -> int``; its docstring is the help header.
"""
