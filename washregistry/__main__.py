"""
Convenience entry point for running washregistry as a module.

Usage: python -m washregistry [command] [options]
"""

from washregistry.cli.app import app

if __name__ == "__main__":
    app()
