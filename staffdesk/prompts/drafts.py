"""
drafts.py - Overlay unsaved draft content onto canonical blocks.

A draft map is owned by the caller (typically one editing session) and maps
block id -> replacement content. It is consulted while reading blocks and is
never written back to the registry.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from staffdesk.prompts.blocks import PromptBlock

logger = logging.getLogger(__name__)

Drafts = Mapping[str, str]


def _canonical_content(block: PromptBlock) -> str:
    content = block.content
    if not isinstance(content, str):
        logger.debug(
            "Block %s has non-string content (%s); reading as empty",
            block.id,
            type(content).__name__,
        )
        return ""
    return content


def effective_content(block: PromptBlock, drafts: Optional[Drafts] = None) -> str:
    """Content to compile for a block: its draft if present, else canonical.

    Raises:
        TypeError: If the draft for this block is not a string.
    """
    if drafts and block.id in drafts:
        draft = drafts[block.id]
        if not isinstance(draft, str):
            raise TypeError(
                f"Draft for block {block.id!r} must be str, got {type(draft).__name__}"
            )
        return draft
    return _canonical_content(block)


def apply_drafts(
    blocks: Sequence[PromptBlock], drafts: Optional[Drafts] = None
) -> List[PromptBlock]:
    """Return blocks with draft content substituted.

    Only `content` differs from the input blocks, and only for ids present in
    drafts. Drafts keyed to ids outside `blocks` have no effect. The input
    blocks and the drafts mapping are left untouched.
    """
    if not drafts:
        return list(blocks)

    result: List[PromptBlock] = []
    for block in blocks:
        if block.id in drafts:
            result.append(block.with_content(effective_content(block, drafts)))
        else:
            result.append(block)
    return result


def dirty_block_ids(
    blocks: Sequence[PromptBlock], drafts: Optional[Drafts] = None
) -> List[str]:
    """Ids of blocks whose draft differs from canonical content, in block order."""
    if not drafts:
        return []
    return [
        block.id
        for block in blocks
        if block.id in drafts
        and effective_content(block, drafts) != _canonical_content(block)
    ]


def has_drafts(blocks: Sequence[PromptBlock], drafts: Optional[Drafts] = None) -> bool:
    """Check whether any block in scope carries an unsaved change."""
    return bool(dirty_block_ids(blocks, drafts))
