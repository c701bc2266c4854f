#!/usr/bin/env python3
"""
Command-line interface for tell.

    tell <prompt words...>     stream an answer from the configured model
    tell --switch <model>      change the configured model
"""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from dotenv import find_dotenv, load_dotenv
from rich.console import Console

from tell.core import config_store
from tell.core.errors import TellError, UsageError
from tell.core.llm_client import Endpoint, OllamaLanguageModel
from tell.core.renderer import StreamRenderer
from tell.utils.logger import init_logger, resolve_level

logger = logging.getLogger(__name__)

USAGE = "Usage: tell <prompt> | tell --switch <model>"
SWITCH_FLAG = "--switch"


@dataclass(frozen=True)
class ShowUsage:
    pass


@dataclass(frozen=True)
class SwitchModel:
    model: str


@dataclass(frozen=True)
class Generate:
    prompt: str


Command = Union[ShowUsage, SwitchModel, Generate]


def parse_args(args: Sequence[str]) -> Command:
    """
    Decide what to do from the arguments after the program name.

    Raises:
        UsageError: If --switch is not followed by exactly one model name
    """
    args = list(args)
    if not args:
        return ShowUsage()

    if args[0] == SWITCH_FLAG:
        if len(args) != 2:
            raise UsageError(f"{SWITCH_FLAG} requires exactly one model name")
        return SwitchModel(model=args[1])

    return Generate(prompt=" ".join(args))


class TellCLI:
    """Runs one parsed command against the config file and the model server."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        endpoint: Optional[Endpoint] = None,
        client=None,
        renderer: Optional[StreamRenderer] = None,
    ):
        self.config_path = Path(config_path) if config_path else None
        self.endpoint = endpoint
        self.client = client
        self.renderer = renderer or StreamRenderer()
        self.console = Console(highlight=False)

    def get_config_path(self) -> Path:
        if self.config_path is None:
            self.config_path = config_store.resolve_path()
        return self.config_path

    def run(self, command: Command) -> int:
        if isinstance(command, ShowUsage):
            self.console.print(USAGE, markup=False)
            return 0

        config_path = self.get_config_path()
        config = config_store.load(config_path)

        if isinstance(command, SwitchModel):
            return self.switch_model(config_path, config, command.model)

        asyncio.run(self.tell(config.model, command.prompt))
        return 0

    def switch_model(self, config_path: Path, config: config_store.Config, model: str) -> int:
        previous = config.model
        config.model = model
        config_store.save(config_path, config)
        logger.info(f"Switched model: {previous} -> {model}")
        self.console.print(f"Switched to model: {model}", markup=False)
        return 0

    async def tell(self, model: str, prompt: str) -> None:
        """Stream the model's answer to prompt onto the terminal."""
        language_model = OllamaLanguageModel(
            model,
            endpoint=self.endpoint or Endpoint.from_env(),
            client=self.client,
        )
        stream = await language_model.generate_stream(prompt)
        # Continuation context is not kept between invocations
        await self.renderer.consume(stream)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    args = sys.argv[1:] if argv is None else argv

    try:
        command = parse_args(args)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 2

    cli = TellCLI()
    if isinstance(command, ShowUsage):
        return cli.run(command)

    load_dotenv(find_dotenv(usecwd=True))
    init_logger(log_level=resolve_level(os.getenv("TELL_LOG_LEVEL")))

    try:
        return cli.run(command)
    except (TellError, OSError) as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
