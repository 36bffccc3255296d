"""
resolver.py - Resolve the ordered block list for an agent or a skillpack.

Resolution order for an agent:
1. registry.shared_blocks      (store order)
2. registry.agent_overlays[id] (store order, empty if the agent has none)

Skillpack resolution is a separate axis: it returns the skillpack's own
blocks only, never shared blocks.

Resolution is total. Unknown ids degrade to "no overlay" instead of raising,
since a newly created agent has no overlay blocks yet.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from staffdesk.prompts.blocks import PromptBlock, PromptRegistry

logger = logging.getLogger(__name__)


def resolve_for_agent(registry: PromptRegistry, agent_id: Optional[str]) -> List[PromptBlock]:
    """Get all prompt blocks for an agent in compiled order.

    Args:
        registry: Block store snapshot.
        agent_id: Agent (staff) identifier.

    Returns:
        Shared blocks followed by the agent's overlay blocks.
    """
    overlay = registry.overlay_for(agent_id)
    if not overlay:
        logger.debug("No overlay blocks for agent %r; using shared blocks only", agent_id)
    return [*registry.shared_blocks, *overlay]


def resolve_for_skillpack(
    registry: PromptRegistry, skillpack_id: Optional[str]
) -> List[PromptBlock]:
    """Get the prompt blocks of a skillpack, or an empty list."""
    blocks = registry.prompts_for(skillpack_id)
    if not blocks:
        logger.debug("No prompt blocks for skillpack %r", skillpack_id)
    return list(blocks)


def split_agent_blocks(
    registry: PromptRegistry, agent_id: Optional[str]
) -> Tuple[List[PromptBlock], List[PromptBlock]]:
    """Return the (shared, agent-specific) halves used by sectioned compile."""
    return list(registry.shared_blocks), list(registry.overlay_for(agent_id))
