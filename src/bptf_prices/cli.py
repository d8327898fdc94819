"""
bptf-prices - Command line entry point
Runs one economy API call and prints the unwrapped response as JSON.

Usage:
    bptf-prices currencies --raw 2
    bptf-prices history --item "Mann Co. Supply Crate Key" --quality Unique
    bptf-prices prices --since 1611752400
    bptf-prices special-items
    bptf-prices --debug --api-key KEY currencies
"""

import argparse
import json
import logging
import sys

from bptf_prices.config import (
    ClientConfig,
    LOG_FILE,
    ITEM_QUALITIES,
    TRADABLE_VALUES,
    CRAFTABLE_VALUES,
)
from bptf_prices.client import EconomyClient
from bptf_prices.errors import EconomyError

logger = logging.getLogger("bptf-prices")


def setup_logging(debug: bool = False):
    """Configure logging.

    Console stays at INFO so the JSON output is readable; the log file
    gets DEBUG (request URLs, key redacted) when --debug is used.
    """
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(message)s",
        datefmt="%H:%M:%S"
    ))

    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.addHandler(console)
    root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bptf-prices",
        description="Query the backpack.tf economy Web API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The API key is read from --api-key, else BPTF_API_KEY (a .env file works).
        """
    )
    parser.add_argument("--api-key", help="backpack.tf developer API key")
    parser.add_argument("--debug", "-d", action="store_true",
                        help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("currencies", help="IGetCurrencies: TF2 currency data")
    p.add_argument("--raw", type=int, help="1 or 2 (default 1)")

    p = sub.add_parser("history", help="IGetPriceHistory: an item's price history")
    p.add_argument("--appid", type=int, help="default 440")
    p.add_argument("--item", help='base item name (default "Team Captain")')
    p.add_argument("--quality", help=f"one of: {', '.join(ITEM_QUALITIES)}")
    p.add_argument("--tradable", help=" or ".join(TRADABLE_VALUES))
    p.add_argument("--craftable", help=" or ".join(CRAFTABLE_VALUES))
    p.add_argument("--priceindex", type=int, help="default 0")

    p = sub.add_parser("prices", help="IGetPrices: the TF2 price schema")
    p.add_argument("--raw", type=int, help="1 or 2 (default 1)")
    p.add_argument("--since", type=int, help="only prices updated at/after this UNIX time")

    p = sub.add_parser("special-items", help="IGetSpecialItems: internal placeholders")
    p.add_argument("--appid", type=int, help="default 440")

    return parser


_OPERATIONS = {
    "currencies": ("get_currencies", ("raw",)),
    "history": ("get_price_history",
                ("appid", "item", "quality", "tradable", "craftable", "priceindex")),
    "prices": ("get_prices", ("raw", "since")),
    "special-items": ("get_special_items", ("appid",)),
}


def run(args, client: EconomyClient) -> int:
    """Execute the parsed command against `client`; returns an exit code."""
    method_name, fields = _OPERATIONS[args.command]
    bag = {name: getattr(args, name) for name in fields
           if getattr(args, name) is not None}
    try:
        data = getattr(client, method_name)(bag).result()
    except EconomyError as e:
        logger.error(f"{args.command}: {e}")
        return 1
    print(json.dumps(data, indent=2, sort_keys=True))
    return 0


def load_config(args) -> ClientConfig:
    """Environment config, with --api-key taking precedence when given."""
    overrides = {"api_key": args.api_key} if args.api_key else {}
    config = ClientConfig.from_env(**overrides)
    if not config.api_key:
        logger.warning("No API key configured; backpack.tf will likely reject the request")
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)

    config = load_config(args)
    with EconomyClient(config=config) as client:
        code = run(args, client)
    sys.exit(code)


if __name__ == "__main__":
    main()
