"""Tests for agent and skillpack block resolution."""

from staffdesk.prompts.blocks import PromptScope
from staffdesk.prompts.resolver import (
    resolve_for_agent,
    resolve_for_skillpack,
    split_agent_blocks,
)


class TestResolveForAgent:
    """Tests for resolve_for_agent."""

    def test_shared_then_overlay(self, eli_registry):
        """Shared blocks come first, then the agent's overlay blocks."""
        blocks = resolve_for_agent(eli_registry, "eli")
        assert [b.id for b in blocks] == ["s1", "a1"]

    def test_every_shared_block_precedes_every_overlay_block(self, multi_registry):
        blocks = resolve_for_agent(multi_registry, "quinn")
        shared_positions = [i for i, b in enumerate(blocks) if b.scope is PromptScope.SHARED]
        agent_positions = [i for i, b in enumerate(blocks) if b.scope is PromptScope.AGENT]

        assert shared_positions and agent_positions
        assert max(shared_positions) < min(agent_positions)

    def test_store_order_preserved(self, multi_registry):
        """Blocks are not re-sorted by id or name."""
        ids = [b.id for b in resolve_for_agent(multi_registry, "quinn")]
        assert ids == [
            "shared_identity",
            "shared_safety",
            "shared_receipts",
            "quinn_invoicing",
            "quinn_reconciliation",
        ]
        assert ids != sorted(ids)

    def test_repeated_calls_identical(self, multi_registry):
        first = resolve_for_agent(multi_registry, "quinn")
        second = resolve_for_agent(multi_registry, "quinn")
        assert [b.id for b in first] == [b.id for b in second]
        assert first == second

    def test_unknown_agent_gets_shared_blocks(self, eli_registry):
        """An unknown agent resolves to exactly the shared blocks."""
        blocks = resolve_for_agent(eli_registry, "unknown-agent-id")
        assert blocks == list(eli_registry.shared_blocks)

    def test_agent_with_empty_overlay(self, multi_registry):
        blocks = resolve_for_agent(multi_registry, "newbie")
        assert blocks == list(multi_registry.shared_blocks)

    def test_scopes_not_reclassified(self, multi_registry):
        blocks = resolve_for_agent(multi_registry, "quinn")
        assert [b.scope for b in blocks] == [
            PromptScope.SHARED,
            PromptScope.SHARED,
            PromptScope.SHARED,
            PromptScope.AGENT,
            PromptScope.AGENT,
        ]

    def test_returned_list_is_independent(self, eli_registry):
        """Mutating the returned list does not affect the registry."""
        blocks = resolve_for_agent(eli_registry, "eli")
        blocks.clear()
        assert len(resolve_for_agent(eli_registry, "eli")) == 2


class TestResolveForSkillpack:
    """Tests for resolve_for_skillpack."""

    def test_skillpack_blocks_verbatim(self, multi_registry):
        blocks = resolve_for_skillpack(multi_registry, "quinn_invoices")
        assert [b.id for b in blocks] == ["qip_line_items", "qip_payment_terms"]

    def test_no_shared_blocks_injected(self, multi_registry):
        blocks = resolve_for_skillpack(multi_registry, "quinn_invoices")
        assert all(b.scope is PromptScope.SKILLPACK for b in blocks)

    def test_unknown_or_missing_skillpack(self, multi_registry):
        assert resolve_for_skillpack(multi_registry, "does-not-exist") == []
        assert resolve_for_skillpack(multi_registry, None) == []


class TestSplitAgentBlocks:
    """Tests for split_agent_blocks."""

    def test_split(self, multi_registry):
        shared, overlay = split_agent_blocks(multi_registry, "quinn")
        assert [b.id for b in shared] == [
            "shared_identity",
            "shared_safety",
            "shared_receipts",
        ]
        assert [b.id for b in overlay] == ["quinn_invoicing", "quinn_reconciliation"]

    def test_split_unknown_agent(self, eli_registry):
        shared, overlay = split_agent_blocks(eli_registry, "ghost")
        assert [b.id for b in shared] == ["s1"]
        assert overlay == []
