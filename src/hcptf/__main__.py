"""
Main entry point for the hcptf CLI

This allows running the CLI with: python -m hcptf
"""
from .cli import run

if __name__ == "__main__":
    run()
