"""Entry point for running db_studio as a module."""

from db_studio.server import cli_entry

if __name__ == "__main__":
    cli_entry()
