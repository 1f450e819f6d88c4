"""
Colorblind Theme — Test Suite
==================================================

unit/         one module per host component or plugin hook
integration/  the full host with the builtin plugin loaded
"""
