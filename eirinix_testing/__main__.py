"""
Main entry point for the harness CLI.
This file allows running the tool as a module: python -m eirinix_testing
"""

from .cli.cli import main

if __name__ == "__main__":
    main()
