"""
Entry point for running censusbot as a module: python -m censusbot
"""

from censusbot.cli.commands import app

if __name__ == "__main__":
    app()
