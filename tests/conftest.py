from __future__ import annotations

from pathlib import Path

import pytest

PERM_CHECK = "AND EXISTS (SELECT 1 FROM permissions WHERE user_id = $2)\n"

GET_SOME_OBJECTS = (
    "SELECT * FROM objects\n"
    "WHERE team_id = $1\n"
    "{% include 'perm_check' %}\n"
)
UPDATE_SOME_OBJECTS = (
    "UPDATE objects\n"
    "SET name = $3\n"
    "WHERE id = $1\n"
    "{% include 'perm_check' %}\n"
)
OTHER_TEMPLATE = "SELECT {{ not_rendered }}\n"

EXPECTED_GET_SOME_OBJECTS = (
    "SELECT * FROM objects\n"
    "WHERE team_id = $1\n"
    "AND EXISTS (SELECT 1 FROM permissions WHERE user_id = $2)\n"
)
EXPECTED_UPDATE_SOME_OBJECTS = (
    "UPDATE objects\n"
    "SET name = $3\n"
    "WHERE id = $1\n"
    "AND EXISTS (SELECT 1 FROM permissions WHERE user_id = $2)\n"
)
HEADER = "-- Autogenerated by sqlweld"


def with_header(header: str, body: str) -> str:
    if not header:
        return body
    return f"{header}\n\n{body}"


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """Input tree with two templates, one partial and one non-SQL template."""
    root = tmp_path / "input"
    root.mkdir()
    (root / "update_some_objects.sql.j2").write_text(UPDATE_SOME_OBJECTS)
    (root / "get_some_objects.sql.j2").write_text(GET_SOME_OBJECTS)
    (root / "other_template.j2").write_text(OTHER_TEMPLATE)
    (root / "perm_check.partial.sql.j2").write_text(PERM_CHECK)
    return root
