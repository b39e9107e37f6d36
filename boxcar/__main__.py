"""
Entry point for running boxcar as a module: python -m boxcar
"""

from boxcar.cli.commands import app

if __name__ == "__main__":
    app()
