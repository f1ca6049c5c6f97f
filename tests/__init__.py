"""Test package for the decimal clock.

This package contains unit tests for the conversion, scheduling, stopwatch
and countdown cores, plus headless simulations and pygame smoke tests.  The
UI tests run with pygame's dummy video driver to avoid opening real
windows.  To run these tests, execute ``pytest`` from the project root.
"""
