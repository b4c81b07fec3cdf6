#!/usr/bin/env python3
"""
Convenience entry point for running proposetimes directly.

Usage: python -m proposetimes [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
