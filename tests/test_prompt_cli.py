"""Tests for the prompt preview CLI."""

import json
import sys

import pytest

from staffdesk.prompts.compiler import SECTION_MARKER, main
from staffdesk.prompts.fingerprint import fingerprint


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["staffdesk-prompts", *args])
    main()


@pytest.fixture
def registry_file(write_registry):
    return write_registry(
        {
            "shared_blocks": [{"id": "s1", "name": "Style", "content": "Be concise."}],
            "agent_overlays": {
                "eli": [{"id": "a1", "name": "Triage", "content": "You triage inbox threads."}],
            },
            "skillpack_prompts": {
                "eli_inbox": [{"id": "k1", "name": "Classify", "content": "Classify email."}],
            },
        }
    )


class TestAgentCommand:
    """Tests for the agent command."""

    def test_text_output(self, monkeypatch, capsys, registry_file):
        run_cli(monkeypatch, "agent", "--id", "eli", "--registry", str(registry_file))
        out = capsys.readouterr().out
        compiled = "Be concise." + SECTION_MARKER + "You triage inbox threads."

        assert "# agent: eli" in out
        assert "# Blocks: s1, a1" in out
        assert f"# Fingerprint: {fingerprint(compiled)}" in out
        assert "/ 120,000 tokens" in out
        assert out.rstrip("\n").endswith("You triage inbox threads.")

    def test_json_output_with_draft(self, monkeypatch, capsys, registry_file, tmp_path):
        draft = tmp_path / "a1.txt"
        draft.write_text("You triage and tag inbox threads.", encoding="utf-8")

        run_cli(
            monkeypatch,
            "agent", "--id", "eli", "--registry", str(registry_file),
            "--draft", f"a1={draft}", "--plain", "--json",
        )
        data = json.loads(capsys.readouterr().out)

        assert data["compiled_text"] == "Be concise.\n\n---\n\nYou triage and tag inbox threads."
        assert data["fingerprint"] == fingerprint(data["compiled_text"])

    def test_output_file(self, monkeypatch, capsys, registry_file, tmp_path):
        target = tmp_path / "compiled.md"
        run_cli(
            monkeypatch,
            "agent", "--id", "ghost", "--registry", str(registry_file),
            "--output", str(target),
        )
        assert target.read_text(encoding="utf-8") == "Be concise."

    def test_missing_id(self, monkeypatch, capsys, registry_file):
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "agent", "--registry", str(registry_file))
        assert exc_info.value.code == 1
        assert "--id required" in capsys.readouterr().out

    def test_bad_draft_spec(self, monkeypatch, capsys, registry_file):
        with pytest.raises(SystemExit):
            run_cli(
                monkeypatch,
                "agent", "--id", "eli", "--registry", str(registry_file), "--draft", "a1",
            )
        assert "BLOCK_ID=PATH" in capsys.readouterr().out

    def test_unreadable_registry(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "agent", "--id", "eli", "--registry", str(tmp_path / "x.yaml"))
        assert exc_info.value.code == 1


class TestOtherCommands:
    """Tests for skillpack, list and validate commands."""

    def test_skillpack(self, monkeypatch, capsys, registry_file):
        run_cli(monkeypatch, "skillpack", "--id", "eli_inbox", "--registry", str(registry_file))
        out = capsys.readouterr().out
        assert "# skillpack: eli_inbox" in out
        assert "Classify email." in out
        assert "Be concise." not in out

    def test_list_baseline(self, monkeypatch, capsys):
        run_cli(monkeypatch, "list")
        out = capsys.readouterr().out
        assert "Shared blocks (4):" in out
        assert "  eli: 2 blocks" in out
        assert "  nora-conference: 3 blocks" in out

    def test_validate_ok(self, monkeypatch, capsys, registry_file):
        run_cli(monkeypatch, "validate", "--registry", str(registry_file))
        assert "OK: 3 blocks" in capsys.readouterr().out

    def test_validate_failure(self, monkeypatch, capsys, write_registry):
        path = write_registry(
            {
                "shared_blocks": [{"id": "dup", "content": "a"}],
                "agent_overlays": {"eli": [{"id": "dup", "content": "b"}]},
            },
            name="dup.yaml",
        )
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "validate", "--registry", str(path))
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "DUPLICATE_ID" in out
        assert "Blocks with errors: dup" in out
