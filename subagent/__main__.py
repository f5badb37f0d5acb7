# subagent/__main__.py
"""Allow `python -m subagent ...` as an alias for the `subagent` command."""
from subagent.cli import app

if __name__ == "__main__":
    app()
