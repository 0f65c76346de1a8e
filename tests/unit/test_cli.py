"""Unit tests for the knowledge-base CLI (src.cli.ingest)."""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path

import pytest

from src.cli.ingest import _build_parser, _run, main


def _args(command: str, **kwargs) -> Namespace:
    return Namespace(command=command, **kwargs)


class TestParser:
    def test_text_subcommand(self) -> None:
        args = _build_parser().parse_args(
            ["text", "--tenant", "acme", "--file", "faq.txt", "--name", "FAQ"]
        )
        assert (args.command, args.tenant, args.file, args.name) == (
            "text",
            "acme",
            "faq.txt",
            "FAQ",
        )

    def test_delete_requires_id(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["delete"])

    def test_main_without_command_exits(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.argv", ["nyxchat-ingest"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1


class TestRun:
    async def test_text_list_delete(self, tmp_path: Path, settings_factory, capsys) -> None:
        settings = settings_factory(knowledge_db_path=str(tmp_path / "kb.db"))
        faq = tmp_path / "faq.txt"
        faq.write_text("Refunds are accepted within 30 days.", encoding="utf-8")

        assert await _run(_args("text", tenant="acme", file=str(faq), name=None), settings) == 0
        out = capsys.readouterr().out
        assert "as 'faq' for tenant acme" in out
        assert "Chunks created:   1" in out
        assert "Embeddings:       0" in out

        assert await _run(_args("list", tenant="acme"), settings) == 0
        listing = capsys.readouterr().out
        assert "1 document(s) for tenant acme" in listing
        doc_id = next(
            line.split()[0] for line in listing.splitlines() if line.endswith("chunks  faq")
        )

        assert await _run(_args("delete", id=doc_id), settings) == 0
        assert f"Deleted document {doc_id}" in capsys.readouterr().out

        assert await _run(_args("list", tenant="acme"), settings) == 0
        assert "No documents for tenant acme" in capsys.readouterr().out

    async def test_missing_file(self, tmp_path: Path, settings_factory, capsys) -> None:
        settings = settings_factory(knowledge_db_path=str(tmp_path / "kb.db"))
        code = await _run(
            _args("text", tenant="acme", file=str(tmp_path / "nope.txt"), name=None), settings
        )
        assert code == 1
        assert "file not found" in capsys.readouterr().err

    async def test_delete_unknown(self, tmp_path: Path, settings_factory, capsys) -> None:
        settings = settings_factory(knowledge_db_path=str(tmp_path / "kb.db"))
        assert await _run(_args("delete", id="nope"), settings) == 1
        assert "document not found" in capsys.readouterr().err

    async def test_application_error_reported(
        self, tmp_path: Path, settings_factory, capsys
    ) -> None:
        settings = settings_factory(knowledge_db_path=str(tmp_path / "kb.db"))
        empty = tmp_path / "empty.txt"
        empty.write_text("", encoding="utf-8")

        code = await _run(_args("text", tenant="acme", file=str(empty), name="Empty"), settings)

        assert code == 1
        assert "tenantId, name, and content required" in capsys.readouterr().err
