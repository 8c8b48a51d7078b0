"""Tests for the sqlweld command line."""

from __future__ import annotations

import sys
from pathlib import Path

from typer.testing import CliRunner

from conftest import EXPECTED_GET_SOME_OBJECTS, HEADER, with_header
from sqlweld.cli import app

runner = CliRunner()


class TestCli:
    def test_renders_tree(self, template_tree: Path):
        result = runner.invoke(app, ["--input", str(template_tree)])

        assert result.exit_code == 0, result.output
        assert (template_tree / "get_some_objects.sql").read_text() == with_header(
            HEADER, EXPECTED_GET_SOME_OBJECTS
        )

    def test_header_and_extension_flags(self, template_tree: Path):
        result = runner.invoke(
            app,
            ["-i", str(template_tree), "--header", "", "--ext", "gen.sql"],
        )

        assert result.exit_code == 0, result.output
        assert (
            template_tree / "get_some_objects.gen.sql"
        ).read_text() == EXPECTED_GET_SOME_OBJECTS

    def test_settings_from_environment(self, template_tree: Path, monkeypatch):
        monkeypatch.setenv("SQLWELD_HEADER", "from env")

        result = runner.invoke(app, ["-i", str(template_tree)])

        assert result.exit_code == 0, result.output
        assert (template_tree / "get_some_objects.sql").read_text() == with_header(
            "-- from env", EXPECTED_GET_SOME_OBJECTS
        )

    def test_set_and_context_file(self, tmp_path: Path):
        (tmp_path / "q.sql.j2").write_text(
            "SELECT * FROM {{ db.schema }}.t LIMIT {{ limit }}\n"
        )
        ctx = tmp_path / "ctx.yaml"
        ctx.write_text("db:\n  schema: public\nlimit: 1\n")

        result = runner.invoke(
            app,
            [
                "-i",
                str(tmp_path),
                "--header",
                "",
                "--context-file",
                str(ctx),
                "--set",
                "limit=10",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "q.sql").read_text() == "SELECT * FROM public.t LIMIT 10\n"

    def test_formatter_flag(self, tmp_path: Path):
        (tmp_path / "q.sql.j2").write_text("select 1\n")
        script = tmp_path / "upper.py"
        script.write_text("import sys\nsys.stdout.write(sys.stdin.read().upper())\n")
        command = f'"{sys.executable}" "{script}"'

        result = runner.invoke(
            app, ["-i", str(tmp_path), "--header", "", "--formatter", command]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "q.sql").read_text() == "SELECT 1\n"

    def test_rerun_hints_on_stdout(self, template_tree: Path):
        result = runner.invoke(
            app, ["-i", str(template_tree), "--print-rerun-if-changed"]
        )

        assert result.exit_code == 0, result.output
        assert (
            f"cargo:rerun-if-changed={template_tree / 'perm_check.partial.sql.j2'}"
            in result.output
        )

    def test_bad_assignment(self, template_tree: Path):
        result = runner.invoke(app, ["-i", str(template_tree), "--set", "novalue"])

        assert result.exit_code == 2

    def test_bad_suffix_from_environment(self, template_tree: Path, monkeypatch):
        monkeypatch.setenv("SQLWELD_PARTIAL_SUFFIX", ".partial.sql")

        result = runner.invoke(app, ["-i", str(template_tree)])

        assert result.exit_code == 2
        assert not (template_tree / "get_some_objects.sql").exists()

    def test_build_error_exits_nonzero(self, tmp_path: Path):
        for name in ("one", "two"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "dup.partial.sql.j2").write_text(name)
        (tmp_path / "q.sql.j2").write_text("SELECT 1\n")

        result = runner.invoke(app, ["-i", str(tmp_path)])

        assert result.exit_code == 1
        assert not (tmp_path / "q.sql").exists()

    def test_no_templates_is_success(self, tmp_path: Path):
        result = runner.invoke(app, ["-i", str(tmp_path)])

        assert result.exit_code == 0
