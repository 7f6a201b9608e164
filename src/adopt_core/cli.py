"""
Command-line entry point: ``adopt-core <command>``.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import uvicorn

from .database.connection import close_engine, create_engine_from_config, wait_for_database
from .database.migrations import run_migrations
from .database.session import SessionManager
from .exceptions import AdoptCoreException
from .recommendation import GREETING, RESULTS_INTRO, RecommendationSession
from .utils.config import AppSettings, DatabaseConfig, LoggingConfigurator


def serve(args: argparse.Namespace) -> None:
    uvicorn.run(
        "adopt_core.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def serve_uploads(args: argparse.Namespace) -> None:
    uvicorn.run(
        "adopt_core.uploads.app:create_upload_app",
        factory=True,
        host=args.host,
        port=args.port,
    )


async def _open_engine():
    engine = create_engine_from_config(DatabaseConfig.from_environment())
    try:
        await wait_for_database(engine)
    except AdoptCoreException:
        await close_engine(engine)
        raise
    return engine


async def _create_tables() -> None:
    from .models import BaseModel

    engine = await _open_engine()
    try:
        await SessionManager(engine).initialize_database(BaseModel.metadata)
    finally:
        await close_engine(engine)


def init_db(args: argparse.Namespace) -> None:
    """Create the schema with Alembic, or straight from the models."""
    if args.create_all:
        asyncio.run(_create_tables())
    else:
        run_migrations(revision=args.revision)
    print("Database schema is up to date")


async def _seed() -> dict:
    from .seed import seed_database

    engine = await _open_engine()
    try:
        async with SessionManager(engine).get_session() as session:
            return await seed_database(session, AppSettings.from_environment())
    finally:
        await close_engine(engine)


def seed(args: argparse.Namespace) -> None:
    counts = asyncio.run(_seed())
    print(", ".join(f"{count} {name}" for name, count in counts.items()) + " created")


def _ask(session: RecommendationSession, preset: List[int]) -> None:
    while not session.is_complete:
        question = session.current_question
        print(f"\n{question.text}")
        for number, option in enumerate(question.options, start=1):
            print(f"  {number}. {option}")
        scripted = bool(preset)
        if scripted:
            choice = preset.pop(0)
        else:
            raw = input("> ").strip()
            if not raw.isdigit():
                print("Please enter the number of an option.")
                continue
            choice = int(raw)
        try:
            session.answer(question.option_for(choice))
        except ValueError as e:
            print(e)
            if scripted:
                raise


async def _recommend(preset: List[int]) -> None:
    from .client import AdoptionClient

    session = RecommendationSession()
    print(GREETING)
    _ask(session, preset)
    async with AdoptionClient.from_environment() as client:
        results = await client.recommend(session.answers)
    if not results:
        print("\nNo pets are available right now. Please check back soon!")
        return
    print(f"\n{RESULTS_INTRO}")
    for scored in results:
        pet = scored.pet
        print(f"- {pet['name']} ({pet['species']}, {pet['age']} yrs): {pet['description']}")


def recommend(args: argparse.Namespace) -> None:
    preset = [int(c) for c in args.choices.split(",")] if args.choices else []
    asyncio.run(_recommend(preset))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="adopt-core", description="Small-pet adoption platform")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.set_defaults(func=serve)

    uploads_parser = subparsers.add_parser("serve-uploads", help="Run the image upload service")
    uploads_parser.add_argument("--host", default="127.0.0.1")
    uploads_parser.add_argument("--port", type=int, default=4000)
    uploads_parser.set_defaults(func=serve_uploads)

    init_parser = subparsers.add_parser("init-db", help="Create or upgrade the database schema")
    init_parser.add_argument("--revision", default="head", help="Alembic revision to upgrade to")
    init_parser.add_argument(
        "--create-all", action="store_true", help="Create tables from the models, skipping Alembic"
    )
    init_parser.set_defaults(func=init_db)

    seed_parser = subparsers.add_parser("seed", help="Replace all data with demo data")
    seed_parser.set_defaults(func=seed)

    recommend_parser = subparsers.add_parser("recommend", help="Find a pet that suits you")
    recommend_parser.add_argument(
        "--choices", help="Comma-separated option numbers, one per question (e.g. 1,2,1,4)"
    )
    recommend_parser.set_defaults(func=recommend)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    args = build_parser().parse_args(argv)
    LoggingConfigurator.configure_from_environment()
    try:
        args.func(args)
    except AdoptCoreException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
