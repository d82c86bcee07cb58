#!/usr/bin/env python3

import argparse
import argcomplete
import logging
import os
import readline  # noqa: F401 - enables line editing for input()
import sys

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .ai import DEFAULT_AGENT_TABLE, LLMOracle
from .config import load_config
from .matcher import DirectCommandMatcher
from .reporter import ResultReporter
from .router import Router
from .tools import TOOL_CATEGORIES, default_registry


logger = logging.getLogger(__name__)

_available_commands: List["Command"] = []
_ai_config: Dict = {}

EXIT_COMMANDS = ("/exit", "/quit", "exit", "quit")


class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class OptionalArg(Argument):
    def __init__(
        self,
        short_option: str,
        long_option: str,
        help: str,
        kwargs: Optional[dict] = None,
    ):
        super().__init__(help=help, kwargs=kwargs)
        self.short_option = short_option
        self.long_option = long_option

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            self.short_option, self.long_option, help=self.help, **self.kwargs
        )


class PositionalArg(Argument):
    def __init__(self, name: str, help: str, kwargs: Optional[dict] = None):
        super().__init__(help=help, kwargs=kwargs)
        self.name = name

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(self.name, help=self.help, **self.kwargs)


@dataclass
class Command:
    name: str
    func: Callable
    help: str
    description: str
    args: List[Argument]


def _load_ai_config(config_path: Optional[str] = None):
    global _ai_config
    if not _ai_config:
        _ai_config = load_config(config_path)


def command(args: List[Argument]):
    def decorator(func):
        if not func.__name__.startswith("handle_"):
            raise ValueError("Command handler must start with 'handle_'.")

        if not func.__doc__:
            raise ValueError(
                f"Command handler '{func.__name__}' must have a docstring for its help text."
            )

        @wraps(func)
        def wrapper(args):
            _load_ai_config(args.config)
            return func(args)

        command_name = func.__name__.split("_")[1]
        # Use the first line of the docstring as the help text and
        # the full docstring for the detailed description.
        help_text = func.__doc__.strip().split("\n")[0]
        _available_commands.append(
            Command(command_name, wrapper, help_text, func.__doc__, args)
        )
        return wrapper

    return decorator


def build_router(config: Dict) -> Router:
    """Wires the registry, the LLM oracle and the direct-command matcher together."""
    matcher = DirectCommandMatcher() if config.get("enable_direct_commands", True) else None
    return Router(
        registry=default_registry(),
        oracle=LLMOracle(config),
        agent_table=DEFAULT_AGENT_TABLE,
        matcher=matcher,
        cwd=os.getcwd(),
    )


def _run_turn(router: Router, reporter: ResultReporter, console: Console, text: str):
    # The spinner renders from its own thread while the turn blocks on I/O
    with console.status("[bold yellow]Working...[/]"):
        outcome = router.handle(text)
    console.print(reporter.render(outcome))


def _interactive_loop(router: Router, reporter: ResultReporter, console: Console):
    console.print("[bold]Ada[/] - type [cyan]/help[/] for help, [cyan]/exit[/] to quit.")
    while True:
        try:
            line = input("> ").strip()
        except (KeyboardInterrupt, EOFError):
            console.print()
            return

        if not line:
            continue
        if line in EXIT_COMMANDS:
            return
        try:
            _run_turn(router, reporter, console, line)
        except KeyboardInterrupt:
            # Ctrl-C abandons the current turn, not the session
            logger.info("Turn interrupted: %r", line)
            console.print("[yellow]Interrupted.[/]")


##############################################################################


@command([])
def handle_chat(args):
    """Start an interactive session with the assistant.
    Whitelisted shell commands (ls, git, cargo, ...) run directly; anything else is
    routed to a specialized agent with a restricted set of tools.
    """
    router = build_router(_ai_config)
    reporter = ResultReporter(router.registry, router.agent_table, _ai_config.get("show_intent", True))
    _interactive_loop(router, reporter, Console())


@command(
    [
        PositionalArg(
            name="request",
            help="The command or natural language request to handle.",
        )
    ]
)
def handle_run(args):
    """Handle a single request and print the result."""
    router = build_router(_ai_config)
    reporter = ResultReporter(router.registry, router.agent_table, _ai_config.get("show_intent", True))
    _run_turn(router, reporter, Console(), args.request)


@command(
    [
        OptionalArg(
            short_option="-c",
            long_option="--category",
            help="Only list the tools of this category.",
            kwargs={"choices": TOOL_CATEGORIES},
        )
    ]
)
def handle_tools(args):
    """List the tools available to the assistant."""
    console = Console()
    registry = default_registry()
    categories = [args.category] if args.category else TOOL_CATEGORIES
    for category in categories:
        console.print(f"[bold]{category}[/]")
        for t in registry.by_category(category):
            description = t.description.splitlines()[0] if t.description else ""
            console.print(f"  [cyan]{t.name}[/] - {description}")


##############################################################################


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def run_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments and executes the corresponding command.

    This function is designed to be testable by allowing arguments to be passed
    directly.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used automatically by `parse_args`.
    """
    parser = argparse.ArgumentParser(
        description="Ada, an AI assistant that routes your requests to the right tools."
    )
    parser.add_argument(
        "--config", help="Path to the config file (default: ~/.ada/config.json)."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging."
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Sub-commands", required=True
    )

    # Sort commands alphabetically for consistent --help output.
    _available_commands.sort(key=lambda cmd: cmd.name)

    for command in _available_commands:
        subparser = subparsers.add_parser(
            command.name, help=command.help, description=command.description
        )
        for arg in command.args:
            arg.add_to_parser(subparser)
        subparser.set_defaults(func=command.func)

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        args.func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """The main entry point for the command-line interface, called by the `ada` script."""
    run_cli()


if __name__ == "__main__":
    main()
