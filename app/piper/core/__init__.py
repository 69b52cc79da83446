"""Core infrastructure for piper.

Paths, configuration, history state and theming shared by all
other packages.
"""
