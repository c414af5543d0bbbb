"""
Websockets Server
"""
import asyncio
from contextlib import asynccontextmanager
from ssl import SSLContext
from typing import Callable, Awaitable, Any

from websockets.asyncio.server import ServerConnection, serve

from auctionhouse.core.async_service import AsyncService

WebsocketHandler = Callable[[ServerConnection], Awaitable[Any]]


class WebsocketsServer(AsyncService):
    """
    Runs a websockets server on the current event loop.

    Each client connection is served by the `WebsocketHandler`.
    """

    def __init__(
        self,
        handler: WebsocketHandler,
        host: str | None = None,
        port: int = 8008,
        ssl_context: SSLContext | None = None,
    ):
        super().__init__()

        self.__handler = handler
        self.__host = host
        self.__port = port
        self.__ssl_context = ssl_context

        self.__ws_server_stop_signal: asyncio.Future[bool] | None = None
        self.__ws_server_task: asyncio.Task | None = None

    @property
    def port(self) -> int:
        """
        Port
        """
        return self.__port

    async def _start(self):
        self.__ws_server_stop_signal = asyncio.get_running_loop().create_future()
        listening = asyncio.Event()

        async def run_ws_server():
            async with serve(
                self.__handler,
                self.__host,
                self.__port,
                ssl=self.__ssl_context,
            ):
                listening.set()
                await self.__ws_server_stop_signal

        self.__ws_server_task = asyncio.create_task(run_ws_server(), name=self.name)

        # surface bind errors as start failures
        listening_task = asyncio.create_task(listening.wait())
        await asyncio.wait(
            (listening_task, self.__ws_server_task),
            return_when=asyncio.FIRST_COMPLETED,
        )
        if not listening.is_set():
            listening_task.cancel()
            self.__ws_server_task.result()

    async def _stop(self):
        if self.__ws_server_stop_signal and not self.__ws_server_stop_signal.done():
            self.__ws_server_stop_signal.set_result(True)
        if self.__ws_server_task:
            await self.__ws_server_task

    @asynccontextmanager
    async def start_server(self):
        """
        Runs the server for the duration of the context
        """
        await self.start()
        await self.await_running()
        try:
            yield self
        finally:
            await self.stop()
            await self.await_stopped()
