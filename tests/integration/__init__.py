# tests/integration/__init__.py
"""
Integration tests: a started HostApplication with the builtin plugin loaded.
"""
