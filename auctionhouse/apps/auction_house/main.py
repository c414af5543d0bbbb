"""
Auction house server
"""
import asyncio
import signal
from pathlib import Path

import click

from auctionhouse.apps.auction_house.app import AuctionHouseApp
from auctionhouse.apps.auction_house.config import AppConfig, ConfigError


async def run(config: AppConfig):
    """
    Runs the app until SIGINT or SIGTERM is received
    """
    app = AuctionHouseApp(config)

    stop_signal = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_signal.set)

    await app.start()
    try:
        await stop_signal.wait()
    finally:
        await app.stop()


@click.command()
@click.option(
    "--config-file",
    required=True,
    type=click.Path(exists=True, resolve_path=True, readable=True, path_type=Path),
    help="TOML config file",
)
def main(config_file: Path):
    """
    Runs the auction house websocket server
    """
    try:
        config = AppConfig.from_config_file(config_file)
    except ConfigError as err:
        raise click.BadParameter(str(err), param_hint="--config-file") from err

    asyncio.run(run(config))


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
