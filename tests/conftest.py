"""
Test fixtures for the prompt compilation engine.

Provides small hand-built registries, a registry YAML writer, and isolation
from runtime config caching and STAFFDESK_* environment overrides.
"""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

# Ensure staffdesk is importable without an installed package
_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from staffdesk.config import runtime_config
from staffdesk.prompts.blocks import PromptBlock, PromptRegistry, PromptScope


# ============================================================================
# Config isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_runtime_config(monkeypatch):
    """Clear cached runtime config and STAFFDESK_* overrides around each test."""
    for name in (
        runtime_config.ENV_TOKEN_CEILING,
        runtime_config.ENV_REGISTRY_PATH,
        runtime_config.ENV_SUMMARY_LINES,
        runtime_config.ENV_SKILLPACK_SUMMARY_LINES,
    ):
        monkeypatch.delenv(name, raising=False)
    runtime_config.reset_config()
    yield
    runtime_config.reset_config()


# ============================================================================
# Registry fixtures
# ============================================================================


def make_block(block_id: str, content: str, scope: PromptScope = PromptScope.SHARED, **kwargs):
    """Build a PromptBlock with a name derived from its id."""
    return PromptBlock(
        id=block_id,
        name=kwargs.pop("name", block_id.replace("_", " ").title()),
        scope=scope,
        content=content,
        **kwargs,
    )


@pytest.fixture
def eli_registry() -> PromptRegistry:
    """One shared block and one overlay block for agent 'eli'."""
    return PromptRegistry(
        shared_blocks=[make_block("s1", "Be concise.")],
        agent_overlays={
            "eli": [make_block("a1", "You triage inbox threads.", PromptScope.AGENT)],
        },
    )


@pytest.fixture
def multi_registry() -> PromptRegistry:
    """Several shared blocks, two agents (one empty) and a skillpack."""
    return PromptRegistry(
        shared_blocks=[
            make_block("shared_identity", "You are an AI staff member."),
            make_block("shared_safety", "SAFETY RULES:\n- Never share PII"),
            make_block("shared_receipts", "Every state change produces a receipt."),
        ],
        agent_overlays={
            "quinn": [
                make_block("quinn_invoicing", "INVOICE PROTOCOL:\nNet 30.", PromptScope.AGENT),
                make_block("quinn_reconciliation", "Match payments daily.", PromptScope.AGENT),
            ],
            "newbie": [],
        },
        skillpack_prompts={
            "quinn_invoices": [
                make_block("qip_line_items", "Validate SKUs.", PromptScope.SKILLPACK),
                make_block("qip_payment_terms", "Standard: Net 30", PromptScope.SKILLPACK),
            ],
        },
    )


@pytest.fixture
def write_registry(tmp_path):
    """Write registry data to a YAML file and return its path."""

    def _write(data: Dict[str, Any], name: str = "registry.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write
