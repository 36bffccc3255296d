"""
blocks.py - Prompt block records and the block store snapshot.

A prompt block is the atomic unit of prompt content. Blocks live in one of
three collections of a PromptRegistry:

- shared_blocks:      applied to every agent
- agent_overlays:     per-agent blocks, keyed by agent id
- skillpack_prompts:  per-skillpack blocks, keyed by skillpack id

Both records are frozen. The registry is a read-only snapshot; edits happen
in an external authoring flow and produce a new registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


class PromptScope(Enum):
    """Composition tier a block belongs to."""
    SHARED = "shared"
    AGENT = "agent"
    SKILLPACK = "skillpack"


@dataclass(frozen=True)
class PromptBlock:
    """A named, scoped unit of prompt text."""

    id: str
    name: str
    scope: PromptScope
    content: str
    file_path: Optional[str] = None  # provenance label, display only

    def with_content(self, content: str) -> "PromptBlock":
        """Return a copy carrying different content and nothing else changed."""
        return replace(self, content=content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "scope": self.scope.value,
            "content": self.content,
            "file_path": self.file_path,
        }


def _freeze_collections(
    collections: Optional[Mapping[str, Any]],
) -> Mapping[str, Tuple[PromptBlock, ...]]:
    frozen = {key: tuple(blocks) for key, blocks in (collections or {}).items()}
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class PromptRegistry:
    """Immutable snapshot of the block store.

    Keyed lookups are total: a missing agent or skillpack id yields an empty
    tuple, never a KeyError. The two keyed mappings take part in equality
    but not in the hash, which covers shared blocks, version and source.
    """

    shared_blocks: Tuple[PromptBlock, ...] = ()
    agent_overlays: Mapping[str, Tuple[PromptBlock, ...]] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    skillpack_prompts: Mapping[str, Tuple[PromptBlock, ...]] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    version: str = "1.0"
    source: Optional[str] = None  # path the snapshot was loaded from

    def __post_init__(self) -> None:
        # The snapshot never aliases caller-owned lists or dicts.
        object.__setattr__(self, "shared_blocks", tuple(self.shared_blocks))
        object.__setattr__(self, "agent_overlays", _freeze_collections(self.agent_overlays))
        object.__setattr__(
            self, "skillpack_prompts", _freeze_collections(self.skillpack_prompts)
        )

    def overlay_for(self, agent_id: Optional[str]) -> Tuple[PromptBlock, ...]:
        """Agent-specific blocks for agent_id, empty if it has none."""
        if agent_id is None:
            return ()
        return self.agent_overlays.get(agent_id, ())

    def prompts_for(self, skillpack_id: Optional[str]) -> Tuple[PromptBlock, ...]:
        """Skillpack blocks for skillpack_id, empty if it has none."""
        if skillpack_id is None:
            return ()
        return self.skillpack_prompts.get(skillpack_id, ())

    def agent_ids(self) -> Tuple[str, ...]:
        return tuple(self.agent_overlays.keys())

    def skillpack_ids(self) -> Tuple[str, ...]:
        return tuple(self.skillpack_prompts.keys())

    def all_blocks(self) -> Iterator[PromptBlock]:
        """Iterate every block: shared, then overlays, then skillpacks."""
        yield from self.shared_blocks
        for blocks in self.agent_overlays.values():
            yield from blocks
        for blocks in self.skillpack_prompts.values():
            yield from blocks

    def get_block(self, block_id: str) -> Optional[PromptBlock]:
        for block in self.all_blocks():
            if block.id == block_id:
                return block
        return None

    def block_count(self) -> int:
        return sum(1 for _ in self.all_blocks())
