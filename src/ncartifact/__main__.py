"""
Main entry point for the ncartifact CLI application.

This module sets up the command-line interface and registers all available commands.
"""

from dotenv import load_dotenv
from typer import Typer

from ncartifact.commands.about import app as about
from ncartifact.commands.share import app as share
from ncartifact.commands.upload import app as upload


app = Typer(
    context_settings={"help_option_names": ["--help", "-h"]},
    no_args_is_help=True  # Show help when no command is provided
)

app.add_typer(about)
app.add_typer(upload)
app.add_typer(share)

def main() -> None:
    """
    Main entry point for the application.

    This function loads environment variables and runs the Typer application.
    """
    load_dotenv()
    app()

if __name__ == "__main__":
    main()
