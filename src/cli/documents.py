# =============================================================================
# src/cli/documents.py - CLI Document Commands
# =============================================================================
#
# Operator CLI for the legal document service. Drives the same services the
# HTTP API uses, against the same SQLite record store and file directory,
# so a document added here can be chatted with over the API and vice versa.
#
# Supported subcommands:
#
#   add      - Register a local file as a new document (status: processing)
#   run      - Run the ingestion pipeline for a document
#   classify - Re-run the legal check on an ingested document
#   chat     - Ask one question about a chat-ready document
#   analyze  - Structured analysis from one party's perspective
#   parties  - List the distinct parties named in a document
#   show     - Print a document summary (without the vector body)
#
# Usage examples:
#   python -m src.cli.documents add --file contract.pdf --title "Lease" --owner u1
#   python -m src.cli.documents run --id <document id>
#   python -m src.cli.documents chat --id <document id> --message "Who are the parties?"
# =============================================================================

"""Standalone CLI for adding, ingesting and querying legal documents.

Usage::

    python -m src.cli.documents add --file /path/to/lease.pdf \\
        --title "Office lease" --owner user-1

    python -m src.cli.documents run --id <document id>

    python -m src.cli.documents chat --id <document id> --message "Who signs?"
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.analysis import AnalysisBias
from src.models.ingestion import IngestionOutcome, IngestionResult
from src.utils.errors import LegalDocError


def _guess_media_type(path: Path) -> str:
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or "application/octet-stream"


def _print_json(model: Any, by_alias: bool = False) -> None:
    print(model.model_dump_json(indent=2, by_alias=by_alias))


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_add(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Store the file and create a record pointing at it."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    data = path.read_bytes()
    media_type = args.media_type or _guess_media_type(path)
    service = components["ingestion_service"]

    document = await service.create_document(
        title=args.title,
        owner_id=args.owner,
        file_type=media_type,
        file_size=len(data),
    )
    storage_id = await components["file_store"].save(f"{document.id}{path.suffix}", data)
    await service.attach_file(document.id, storage_id)

    print(f"Added document: {document.id}")
    print(f"  Title:      {args.title}")
    print(f"  Media type: {media_type}")
    print(f"  Size:       {len(data)} bytes")
    print(f"\nRun ingestion with: python -m src.cli.documents run --id {document.id}")
    return 0


async def _handle_run(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run ingestion and print the result; a failed run exits non-zero."""
    try:
        result = await components["ingestion_service"].run_ingestion(args.id)
    except LegalDocError as exc:
        _print_json(
            IngestionResult(
                document_id=args.id,
                outcome=IngestionOutcome.FAILED,
                error=f"{type(exc).__name__}: {exc.message}",
            )
        )
        return 1

    _print_json(result)
    return 0


async def _handle_classify(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["ingestion_service"].classify_document(args.id)
    _print_json(result)
    return 0


async def _handle_chat(args: argparse.Namespace, components: dict[str, Any]) -> int:
    answer = await components["chat_service"].chat(args.id, args.message)
    print(answer.content)
    if answer.references:
        print("\nReferences:")
        for reference in answer.references:
            page = f"p.{reference.page}" if reference.page is not None else "p.?"
            print(f"  [{page}] {reference.text}")
    return 0


async def _handle_analyze(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Print the analysis in the same camelCase shape the HTTP API returns."""
    result = await components["analysis_service"].analyze_document(
        args.id, args.perspective, AnalysisBias(args.bias)
    )
    _print_json(result, by_alias=True)
    return 0


async def _handle_parties(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["analysis_service"].extract_parties(args.id)
    for party in result.parties:
        print(party)
    return 0


async def _handle_show(args: argparse.Namespace, components: dict[str, Any]) -> int:
    from src.api.schemas import DocumentSummaryResponse

    document = await components["document_store"].get(args.id)
    if document is None:
        print(f"Error: document not found: {args.id}", file=sys.stderr)
        return 1
    _print_json(DocumentSummaryResponse.from_document(document))
    return 0


_HANDLERS = {
    "add": _handle_add,
    "run": _handle_run,
    "classify": _handle_classify,
    "chat": _handle_chat,
    "analyze": _handle_analyze,
    "parties": _handle_parties,
    "show": _handle_show,
}


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build the component graph, run one handler, and release resources."""
    from src.main import build_components

    components = build_components(app_settings)
    await components["document_store"].initialize()
    try:
        return await _HANDLERS[args.command](args, components)
    except LegalDocError as exc:
        print(f"Error: {type(exc).__name__}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the document CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.documents",
        description="Add, ingest and query legal documents.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Document commands")

    # -- add --
    add_parser = subparsers.add_parser("add", help="Register a local file as a document")
    add_parser.add_argument("--file", required=True, help="Path to the PDF or text file")
    add_parser.add_argument("--title", required=True, help="Document title")
    add_parser.add_argument("--owner", required=True, help="Owner (user) id")
    add_parser.add_argument(
        "--media-type",
        dest="media_type",
        default=None,
        help="Declared media type (default: guessed from the file extension)",
    )

    # -- run --
    run_parser = subparsers.add_parser("run", help="Run the ingestion pipeline")
    run_parser.add_argument("--id", required=True, help="Document id")

    # -- classify --
    classify_parser = subparsers.add_parser("classify", help="Re-run the legal check")
    classify_parser.add_argument("--id", required=True, help="Document id")

    # -- chat --
    chat_parser = subparsers.add_parser("chat", help="Ask a question about a document")
    chat_parser.add_argument("--id", required=True, help="Document id")
    chat_parser.add_argument("--message", required=True, help="The question")

    # -- analyze --
    analyze_parser = subparsers.add_parser("analyze", help="Structured analysis for one party")
    analyze_parser.add_argument("--id", required=True, help="Document id")
    analyze_parser.add_argument("--perspective", required=True, help="Party whose interests to analyse")
    analyze_parser.add_argument(
        "--bias",
        choices=[bias.value for bias in AnalysisBias],
        default=AnalysisBias.NEUTRAL.value,
        help="Analysis slant (default: neutral)",
    )

    # -- parties --
    parties_parser = subparsers.add_parser("parties", help="List the parties named in a document")
    parties_parser.add_argument("--id", required=True, help="Document id")

    # -- show --
    show_parser = subparsers.add_parser("show", help="Print a document summary")
    show_parser.add_argument("--id", required=True, help="Document id")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the document tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    exit_code = asyncio.run(_dispatch(args, app_settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
