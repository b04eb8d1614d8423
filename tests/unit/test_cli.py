import json

import pytest

from portable_content.app_shell.cli import main


@pytest.fixture
def no_rules(tmp_path):
    return ["--rules", str(tmp_path / "missing.yaml")]


def test_migrate_in_memory(no_rules, capsys):
    assert main([*no_rules, "migrate", "--memory", "--info"]) == 0
    out = capsys.readouterr().out
    assert "Database migration completed successfully!" in out
    assert "Table: content_items" in out
    assert "Table: markdown_blocks" in out
    assert "id (TEXT) NULL PRIMARY KEY" in out
    assert "type (TEXT) NOT NULL" in out


def test_migrate_file_then_info(no_rules, tmp_path, capsys):
    db = tmp_path / "nested" / "content.db"
    assert main([*no_rules, "migrate", "--path", str(db)]) == 0
    assert db.exists()

    capsys.readouterr()
    assert main([*no_rules, "info", "--path", str(db)]) == 0
    assert "Table: markdown_blocks" in capsys.readouterr().out


def test_info_missing_database(no_rules, tmp_path):
    assert main([*no_rules, "info", "--path", str(tmp_path / "absent.db")]) == 1


def test_validate_valid_json(no_rules, tmp_path, capsys):
    doc = tmp_path / "item.json"
    doc.write_text(
        json.dumps({"type": "note", "blocks": [{"kind": "markdown", "source": "# Hi"}]})
    )
    assert main([*no_rules, "validate", str(doc)]) == 0
    assert "Content is valid." in capsys.readouterr().out


def test_validate_invalid_yaml_document(no_rules, tmp_path, capsys):
    doc = tmp_path / "item.yaml"
    doc.write_text("type: note\nblocks:\n  - kind: markdown\n    source: '[x](javascript:1)'\n")
    assert main([*no_rules, "validate", str(doc)]) == 1
    assert "blocks[0].source: Links must use valid URLs" in capsys.readouterr().out


def test_validate_non_mapping(no_rules, tmp_path, capsys):
    doc = tmp_path / "list.json"
    doc.write_text("[1, 2]")
    assert main([*no_rules, "validate", str(doc)]) == 1


def test_validate_unreadable_file(no_rules, tmp_path):
    assert main([*no_rules, "validate", str(tmp_path / "missing.json")]) == 1


def test_uses_project_rules(rules_path):
    assert main(["--rules", str(rules_path), "migrate", "--memory"]) == 0


def test_bad_rules_file(tmp_path):
    rules = tmp_path / "rules.yaml"
    rules.write_text("blocks: [")
    assert main(["--rules", str(rules), "migrate", "--memory"]) == 1
