"""Allow running the agent with python -m bmtprint."""

from bmtprint.cli import main

if __name__ == "__main__":
    main()
