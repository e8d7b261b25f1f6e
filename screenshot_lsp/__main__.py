"""Main entry point for running screenshot_lsp as a module."""

from .cli import main

if __name__ == "__main__":
    main()
