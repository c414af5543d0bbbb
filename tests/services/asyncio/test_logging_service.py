import asyncio
import logging
import unittest
from logging import LogRecord
from logging.handlers import QueueHandler

from auctionhouse.services.asyncio.logging_service import AsyncLoggingService

logger = logging.getLogger(__name__)


class FooLogHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[LogRecord] = []

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)


class LoggingServiceWithHandlersTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.handler = FooLogHandler()
        self.logging_service = AsyncLoggingService(
            level=logging.DEBUG, handlers=[self.handler]
        )
        await self.logging_service.start()
        await self.logging_service.await_running()

    async def asyncTearDown(self) -> None:
        await self.logging_service.stop()
        await self.logging_service.await_stopped()

    async def test_local_logging(self):
        root_handlers = logging.getLogger().handlers
        self.assertEqual(1, len(root_handlers))
        self.assertIsInstance(root_handlers[0], QueueHandler)

        msg = "Ciao Mundo!"
        logger.info(msg)

        # records are handled on the queue listener thread
        for _ in range(100):
            if any(record.getMessage() == msg for record in self.handler.records):
                break
            await asyncio.sleep(0.01)
        matches = [
            record for record in self.handler.records if record.getMessage() == msg
        ]
        self.assertEqual(1, len(matches))

    async def test_stop_restores_handlers(self):
        await self.logging_service.stop()

        root_handlers = logging.getLogger().handlers
        self.assertEqual([self.handler], root_handlers)

        msg = "logged synchronously"
        logger.info(msg)
        self.assertTrue(
            any(record.getMessage() == msg for record in self.handler.records)
        )


if __name__ == "__main__":
    unittest.main()
