"""CLI module for piper.

This module contains the Typer-based command-line interface.
"""
