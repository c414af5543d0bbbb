"""
Websocket protocol
"""
from enum import IntEnum
from typing import Protocol, AsyncIterator

Data = str | bytes


class CloseCode(IntEnum):
    """
    WebSocket close codes
    """

    # Normal close
    OK = 1000
    # Indicates a server side error has caused the connection to go away.
    GOING_AWAY = 1001


class Websocket(Protocol):
    """
    Server side websocket connection, e.g., websockets `ServerConnection`
    """

    def __aiter__(self) -> AsyncIterator[Data]:
        """
        Iterates over incoming messages until the connection is closed
        """

    async def send(self, message: Data) -> None:
        """
        Used to send messages
        """

    async def close(self, code: int = 1000, reason: str = "") -> None:
        """
        Closes the websocket connection
        """
