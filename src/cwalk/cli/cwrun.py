"""
cwrun - Run a Parsed C Program
==============================

This module implements the command-line interface for the execution
engine. It reads a JSON AST document (see cwalk.interp.loader), runs it
and prints the value of the top-level 'return'.

Usage Examples
--------------
Run a program:
    $ cwrun program.json

Treat never-assigned variables as 0 instead of failing:
    $ cwrun --allow-uninitialized program.json

Verbose mode, with a statement trace:
    $ cwrun -v --trace program.json

Exit Codes
----------
0 success, 1 program error, 2 invalid input, 3 internal error
"""

import logging
from pathlib import Path

import click

from cwalk import __version__
from cwalk.cli.errors import handle_cli_exception
from cwalk.interp import Interpreter, InterpreterOptions, load_file
from cwalk.interp.variable import PointerRef


def format_value(value) -> str:
    """Render a returned value for display."""
    if isinstance(value, PointerRef):
        return f"<pointer {value}>"
    if value is None:
        return "NULL"
    return str(value)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--allow-uninitialized",
    is_flag=True,
    help="Read never-assigned variables as 0 instead of failing",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed statement (shown with -v)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="cwrun")
def main(
    input_file: Path,
    allow_uninitialized: bool,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a parsed C program.

    INPUT_FILE is a JSON AST document. The value of the program's
    top-level 'return' is printed.

    \b
    Examples:
        cwrun prog.json                        # Run and print the result
        cwrun --allow-uninitialized prog.json  # Uninitialised reads give 0
        cwrun -v --trace prog.json             # Log every statement
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    options = InterpreterOptions(
        check_uninitialized=not allow_uninitialized,
        trace_statements=trace,
        filename=str(input_file),
    )

    try:
        if verbose:
            click.echo(f"Running {input_file}...")

        statements = load_file(input_file)
        result = Interpreter(options).run(statements)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)

    if result.return_value is not None:
        click.echo(format_value(result.value))
    elif verbose:
        click.echo("Program ended without returning a value")

    if verbose:
        click.echo(f"Executed {result.statements_executed} statements")


if __name__ == "__main__":
    main()
