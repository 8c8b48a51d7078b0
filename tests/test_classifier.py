"""Unit tests for discovery.classifier."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from sqlweld.core.errors import DuplicatePartialError, InternalConsistencyError
from sqlweld.core.models import DiscoveredPath, Options, Role
from sqlweld.discovery.classifier import PartialRegistry, classify, collect

ROOT = Path("/src/queries")
OPTIONS = Options(input=ROOT)


class TestClassify:
    def test_macro(self):
        entry = classify(ROOT / "lib" / "paging.macros.sql.j2", ROOT, OPTIONS)
        assert entry.role is Role.MACRO
        assert entry.name == "paging"

    def test_partial(self):
        entry = classify(ROOT / "lib" / "perm_check.partial.sql.j2", ROOT, OPTIONS)
        assert entry.role is Role.PARTIAL
        assert entry.name == "perm_check"

    def test_normal_uses_relative_name(self):
        entry = classify(ROOT / "reports" / "daily.sql.j2", ROOT, OPTIONS)
        assert entry.role is Role.NORMAL
        assert entry.name == "reports/daily"

    def test_normal_at_root(self):
        entry = classify(ROOT / "get_objects.sql.j2", ROOT, OPTIONS)
        assert entry.name == "get_objects"

    def test_unrecognised_suffix(self):
        with pytest.raises(InternalConsistencyError) as excinfo:
            classify(ROOT / "notes.txt", ROOT, OPTIONS)
        assert excinfo.value.path == ROOT / "notes.txt"

    def test_empty_partial_name(self):
        with pytest.raises(InternalConsistencyError):
            classify(ROOT / ".partial.sql.j2", ROOT, OPTIONS)

    def test_macro_checked_before_partial(self):
        options = Options(
            input=ROOT,
            partial_suffix=".p.sql.j2",
            macro_suffix=".lib.p.sql.j2",
        )
        entry = classify(ROOT / "x.lib.p.sql.j2", ROOT, options)
        assert entry.role is Role.MACRO
        assert entry.name == "x"


class TestOptionsSuffixes:
    def test_partial_suffix_must_extend_template_suffix(self):
        with pytest.raises(ValueError):
            Options(partial_suffix=".partial.sql")

    def test_suffixes_must_differ(self):
        with pytest.raises(ValueError):
            Options(partial_suffix=".x.sql.j2", macro_suffix=".x.sql.j2")


class TestPartialRegistry:
    def _entry(self, path: str, name: str = "dup") -> DiscoveredPath:
        return DiscoveredPath(path=Path(path), role=Role.PARTIAL, name=name)

    def test_duplicate_reports_both_paths(self):
        registry = PartialRegistry()
        registry.add(self._entry("/b/dup.partial.sql.j2"))

        with pytest.raises(DuplicatePartialError) as excinfo:
            registry.add(self._entry("/a/dup.partial.sql.j2"))

        assert excinfo.value.first == Path("/a/dup.partial.sql.j2")
        assert excinfo.value.second == Path("/b/dup.partial.sql.j2")
        assert "/a/dup.partial.sql.j2" in str(excinfo.value)
        assert "/b/dup.partial.sql.j2" in str(excinfo.value)

    def test_error_independent_of_order(self):
        errors = []
        for order in (("/a", "/b"), ("/b", "/a")):
            registry = PartialRegistry()
            registry.add(self._entry(f"{order[0]}/dup.partial.sql.j2"))
            with pytest.raises(DuplicatePartialError) as excinfo:
                registry.add(self._entry(f"{order[1]}/dup.partial.sql.j2"))
            errors.append((excinfo.value.first, excinfo.value.second))
        assert errors[0] == errors[1]

    def test_same_path_twice_is_not_duplicate(self):
        registry = PartialRegistry()
        registry.add(self._entry("/a/dup.partial.sql.j2"))
        registry.add(self._entry("/a/dup.partial.sql.j2"))
        assert len(registry) == 1

    def test_frozen_registry_rejects_additions(self):
        registry = PartialRegistry()
        frozen = registry.freeze()

        with pytest.raises(InternalConsistencyError):
            registry.add(self._entry("/a/x.partial.sql.j2", name="x"))
        with pytest.raises(TypeError):
            frozen["x"] = self._entry("/a/x.partial.sql.j2", name="x")  # type: ignore[index]


class TestCollect:
    def test_splits_partials_and_templates(self):
        paths = [
            ROOT / "b.sql.j2",
            ROOT / "lib" / "perm.partial.sql.j2",
            ROOT / "a.sql.j2",
            ROOT / "lib" / "paging.macros.sql.j2",
        ]

        discovery = collect(paths, ROOT, OPTIONS)

        assert [t.name for t in discovery.templates] == ["a", "b"]
        assert set(discovery.partials) == {"perm", "paging"}
        assert discovery.partials["paging"].role is Role.MACRO

    def test_hints_written_when_requested(self):
        stream = io.StringIO()
        options = Options(input=ROOT, print_rerun_if_changed=True)

        collect([ROOT / "a.sql.j2"], ROOT, options, hint_stream=stream)

        assert stream.getvalue() == f"cargo:rerun-if-changed={ROOT / 'a.sql.j2'}\n"

    def test_no_hints_by_default(self):
        stream = io.StringIO()
        collect([ROOT / "a.sql.j2"], ROOT, OPTIONS, hint_stream=stream)
        assert stream.getvalue() == ""
