"""
Provides support for the Command pattern
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from logging import Logger
from typing import TypeVar, Generic

Args = TypeVar("Args")

Result = TypeVar("Result")


class Command(Generic[Args, Result], ABC):
    """
    Commands are invoked as functions.

    Commands are synchronous. Async code runs them off the event loop via `run_command()`.
    """

    @abstractmethod
    def __call__(self, args: Args) -> Result:
        """
        Executes the command
        """

    def get_logger(self, name: str | None = None) -> Logger:
        """
        Returns a logger using the class name as the logger name.
        If `name` is specifed, then it is appended to the class name: `{self.__class__.__name__}.{name}`
        """
        if name is None:
            return logging.getLogger(self.__class__.__name__)

        return logging.getLogger(f"{self.__class__.__name__}.{name}")


async def run_command(
    executor: Executor | None,
    command: Command[Args, Result],
    args: Args,
) -> Result:
    """
    Runs the command on the executor without blocking the event loop.

    :param executor: if None, then the event loop's default executor is used
    """
    return await asyncio.get_running_loop().run_in_executor(executor, command, args)
