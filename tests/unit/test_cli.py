"""Unit tests for the document CLI (src.cli.documents)."""

from __future__ import annotations

import json
from argparse import Namespace
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cli import documents as cli
from src.models.analysis import AnalysisBias, AnalysisResult, DocumentAnalysis, PartyExtractionResult
from src.models.chat import ChatMessage, ChatRole, DocumentReference
from src.models.document import Document
from src.models.ingestion import IngestionOutcome, IngestionResult
from src.utils.errors import EmptyContentError

# ======================================================================
# Shared helpers
# ======================================================================


def _components(document_store=None, file_store=None) -> dict[str, Any]:  # noqa: ANN001
    ingestion = MagicMock()
    ingestion.create_document = AsyncMock(
        return_value=Document(id="doc-1", title="Lease", owner_id="u1", file_type="text/plain")
    )
    ingestion.attach_file = AsyncMock(return_value="doc-1")
    ingestion.run_ingestion = AsyncMock(
        return_value=IngestionResult(document_id="doc-1", outcome=IngestionOutcome.COMPLETED, chunk_count=1)
    )
    analysis = MagicMock()
    analysis.extract_parties = AsyncMock(
        return_value=PartyExtractionResult(document_id="doc-1", parties=["Acme Corp", "Jane Doe"])
    )
    analysis.analyze_document = AsyncMock(
        return_value=AnalysisResult(
            document_id="doc-1",
            party_perspective="Tenant",
            bias=AnalysisBias.RISK,
            is_legal=False,
            note="Not a legal document.",
        )
    )
    chat = MagicMock()
    chat.chat = AsyncMock(
        return_value=ChatMessage(
            role=ChatRole.ASSISTANT,
            content="Twelve months.",
            references=[DocumentReference(page=2, text="term of twelve months")],
        )
    )
    return {
        "ingestion_service": ingestion,
        "chat_service": chat,
        "analysis_service": analysis,
        "document_store": document_store,
        "file_store": file_store,
    }


# ======================================================================
# Parser
# ======================================================================


class TestParser:
    def test_add_arguments(self) -> None:
        args = cli._build_parser().parse_args(
            ["add", "--file", "a.pdf", "--title", "Lease", "--owner", "u1"]
        )
        assert args.command == "add"
        assert args.media_type is None

    def test_chat_requires_message(self) -> None:
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(["chat", "--id", "doc-1"])

    def test_no_command_exits(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 1

    def test_analyze_defaults_to_neutral(self) -> None:
        args = cli._build_parser().parse_args(["analyze", "--id", "doc-1", "--perspective", "Tenant"])
        assert args.bias == "neutral"

    def test_analyze_rejects_unknown_bias(self) -> None:
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(
                ["analyze", "--id", "doc-1", "--perspective", "Tenant", "--bias", "hostile"]
            )


# ======================================================================
# Handlers
# ======================================================================


class TestHandlers:
    @pytest.mark.asyncio
    async def test_add_saves_file_and_attaches(self, tmp_path: Path, file_store, capsys) -> None:  # noqa: ANN001
        path = tmp_path / "lease.txt"
        path.write_text("This lease is made between the parties.", encoding="utf-8")
        components = _components(file_store=file_store)

        args = Namespace(file=str(path), title="Lease", owner="u1", media_type=None)
        code = await cli._handle_add(args, components)

        assert code == 0
        assert file_store.files["doc-1.txt"] == path.read_bytes()
        create_kwargs = components["ingestion_service"].create_document.await_args.kwargs
        assert create_kwargs["file_type"] == "text/plain"
        components["ingestion_service"].attach_file.assert_awaited_once_with("doc-1", "doc-1.txt")
        assert "doc-1" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_add_missing_file(self, tmp_path: Path, capsys) -> None:  # noqa: ANN001
        args = Namespace(file=str(tmp_path / "nope.pdf"), title="t", owner="u", media_type=None)
        assert await cli._handle_add(args, _components()) == 1
        assert "not found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_run_prints_result(self, capsys) -> None:  # noqa: ANN001
        code = await cli._handle_run(Namespace(id="doc-1"), _components())
        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["outcome"] == "completed"

    @pytest.mark.asyncio
    async def test_run_failure_reports_failed_outcome(self, capsys) -> None:  # noqa: ANN001
        components = _components()
        components["ingestion_service"].run_ingestion.side_effect = EmptyContentError()

        code = await cli._handle_run(Namespace(id="doc-1"), components)

        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["outcome"] == "failed"
        assert output["error"].startswith("EmptyContentError")

    @pytest.mark.asyncio
    async def test_chat_prints_answer_and_references(self, capsys) -> None:  # noqa: ANN001
        code = await cli._handle_chat(Namespace(id="doc-1", message="How long?"), _components())
        out = capsys.readouterr().out
        assert code == 0
        assert "Twelve months." in out
        assert "[p.2] term of twelve months" in out

    @pytest.mark.asyncio
    async def test_show_missing_document(self, document_store, capsys) -> None:  # noqa: ANN001
        code = await cli._handle_show(Namespace(id="nope"), _components(document_store=document_store))
        assert code == 1

    @pytest.mark.asyncio
    async def test_show_summary_omits_vector(self, document_store, capsys) -> None:  # noqa: ANN001
        await document_store.create(
            Document(id="doc-1", title="Lease", owner_id="u1", file_type="text/plain", vector_embedding=[0.1, 0.2])
        )
        code = await cli._handle_show(Namespace(id="doc-1"), _components(document_store=document_store))
        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["vector_length"] == 2
        assert "vector_embedding" not in output

    @pytest.mark.asyncio
    async def test_parties_one_per_line(self, capsys) -> None:  # noqa: ANN001
        code = await cli._handle_parties(Namespace(id="doc-1"), _components())
        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["Acme Corp", "Jane Doe"]

    @pytest.mark.asyncio
    async def test_analyze_passes_bias_and_prints_result(self, capsys) -> None:  # noqa: ANN001
        components = _components()

        code = await cli._handle_analyze(
            Namespace(id="doc-1", perspective="Tenant", bias="risk"), components
        )

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["is_legal"] is False
        assert output["note"] == "Not a legal document."
        components["analysis_service"].analyze_document.assert_awaited_once_with(
            "doc-1", "Tenant", AnalysisBias.RISK
        )

    @pytest.mark.asyncio
    async def test_analyze_prints_camel_case_analysis(self, capsys, sample_analysis_payload) -> None:  # noqa: ANN001
        components = _components()
        components["analysis_service"].analyze_document.return_value = AnalysisResult(
            document_id="doc-1",
            party_perspective="Tenant",
            bias=AnalysisBias.NEUTRAL,
            is_legal=True,
            analysis=DocumentAnalysis.model_validate(sample_analysis_payload),
        )

        await cli._handle_analyze(Namespace(id="doc-1", perspective="Tenant", bias="neutral"), components)

        output = json.loads(capsys.readouterr().out)
        assert output["analysis"]["riskScore"] == 35
        assert output["analysis"]["overallImpression"]["cons"] == ["No liability cap"]
