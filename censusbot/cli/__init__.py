"""CLI module for censusbot."""
