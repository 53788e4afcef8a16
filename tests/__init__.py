"""Test package for the typing trial.

Core modules are driven with a fake clock and seeded or scripted random
streams so every run is deterministic. The pygame shell is exercised with
SDL's dummy drivers so no real window or audio device is opened. To run the
tests, execute ``pytest`` from the project root.
"""
