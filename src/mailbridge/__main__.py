"""Entry point for 'python -m mailbridge' command."""

from mailbridge.cli import main

if __name__ == "__main__":
    main()
