"""Unit tests: one module per host component or plugin hook."""
