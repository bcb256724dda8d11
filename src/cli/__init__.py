# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line tools for operators who need to drive the legal document
# service without the HTTP API (local testing, re-running a failed
# ingestion, spot-checking a chat answer).
#
# Architecture Notes:
#   - argparse for argument parsing, one subparser per command.
#   - The service graph is built through src.main.build_components, so the
#     CLI and the API use the same stores, providers and configuration.
#   - Heavy imports are deferred inside functions to keep --help fast.
# =============================================================================

"""CLI tools for the legal document service.

- ``python -m src.cli.documents`` - add, ingest, classify, chat with and
  inspect documents.
"""
