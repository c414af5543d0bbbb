"""
Async logging service
"""
import logging
import multiprocessing
from logging.handlers import QueueHandler, QueueListener
from queue import SimpleQueue

from auctionhouse.core.async_service import AsyncService
from auctionhouse.core.logging import configure_logging


class AsyncLoggingService(AsyncService):
    """
    Reconfigures logging to let handlers do their work on a separate thread from the one which does the logging.

    The event loop thread only enqueues log records. Handler I/O is done by a `QueueListener` thread.
    """

    def __init__(
        self,
        level: int = logging.WARNING,
        handlers: list[logging.Handler] | None = None,
        multiprocessing_logging_enabled: bool = False,
    ):
        """
        :param level: root logging level
        :param handlers: root logging handlers
        :param multiprocessing_logging_enabled: If True, then log records from multiprocessing tasks will be collected.
            The app must ensure that all log records can be pickled.
        """
        super().__init__()
        self.level = level
        self.__handlers = handlers[:] if handlers else None
        self.__queue = (
            multiprocessing.Queue()
            if multiprocessing_logging_enabled
            else SimpleQueue()
        )
        self.__listener: QueueListener | None = None

    async def _start(self) -> None:
        configure_logging(self.level, self.__handlers)

        root = logging.getLogger()
        handlers: list[logging.Handler] = root.handlers[:]
        root.handlers.clear()
        root.addHandler(QueueHandler(self.__queue))  # type: ignore

        self.__listener = QueueListener(
            self.__queue,  # type: ignore
            *handlers,
            respect_handler_level=True,
        )
        self.__listener.start()

    async def _stop(self):
        if self.__listener:
            self.__listener.stop()
            self.__listener = None

        # restore synchronous handlers
        configure_logging(self.level, self.__handlers)
