"""
Entry point for running LLM RPA Planner as a module.

Enables execution via:
    python -m llm_rpa [command] [options]

This is equivalent to running the installed CLI:
    llm-rpa [command] [options]
"""

from llm_rpa.cli import app

if __name__ == "__main__":
    app()
