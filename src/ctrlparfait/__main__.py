"""
Entry point for running CTRL_PaRFait as a module.

Usage:
    python -m ctrlparfait [command] [options]
"""

from ctrlparfait.cli import main

if __name__ == "__main__":
    main()
