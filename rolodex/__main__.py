"""
Entry point for running rolodex as a module.

Usage:
    python -m rolodex --help
    python -m rolodex add --name Alice --phone 08123456789 --email a@work.com
    python -m rolodex search --fuzzy alise
"""

from rolodex.cli import cli

if __name__ == "__main__":
    cli()
