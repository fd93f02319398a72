"""docstore CLI entry point."""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from docstore import __version__
from docstore.config import Settings, get_settings
from docstore.database import DocstoreError, MongoContext
from docstore.observability import configure_logging, initialize_logfire

logger = logging.getLogger(__name__)


async def _ping(context: MongoContext, args: argparse.Namespace) -> int:
    if await context.check_connection():
        print(f"OK {context.database_name}")
        return 0
    print(f"UNREACHABLE {context.get_info()['url']}")
    return 1


async def _info(context: MongoContext, args: argparse.Namespace) -> int:
    info = context.get_info()
    info["status"] = "connected" if await context.check_connection() else "disconnected"
    print(json.dumps(info, indent=2))
    return 0


async def _count(context: MongoContext, args: argparse.Namespace) -> int:
    collection = context.get_collection(args.collection)
    count = await collection.count_documents({})
    print(count)
    return 0


COMMANDS = {
    "ping": _ping,
    "info": _info,
    "count": _count,
}


async def run_command(settings: Settings, args: argparse.Namespace) -> int:
    async with MongoContext.from_settings(settings) as context:
        return await COMMANDS[args.command](context, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docstore",
        description="Inspect the MongoDB database behind docstore repositories",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--url", help="Connection string (overrides settings)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("ping", help="Check that the server answers")
    subparsers.add_parser("info", help="Show connection details")
    count_parser = subparsers.add_parser("count", help="Count documents in a collection")
    count_parser.add_argument("collection", help="Collection name")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.url:
        settings = settings.model_copy(
            update={"mongo": settings.mongo.model_copy(update={"url": args.url})}
        )

    configure_logging(settings)
    initialize_logfire(settings)

    try:
        return asyncio.run(run_command(settings, args))
    except (DocstoreError, PyMongoError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
