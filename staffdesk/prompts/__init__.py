"""
staffdesk/prompts - Prompt compilation engine for AI staff agents.

This package assembles an agent's effective system prompt from scoped
prompt blocks:
- Blocks: PromptBlock records and the PromptRegistry snapshot
- Registry: YAML loading and integrity validation of the block store
- Resolver: ordered block lists per agent (shared first) or per skillpack
- Drafts: read-time overlay of unsaved edits
- Compiler: plain and sectioned joins, plus the full compile pipeline
- Tokens / Fingerprint: budget estimate and change-detection hash

Usage:
    from staffdesk.prompts import (
        load_prompt_registry,
        compile_for_agent,
        is_dirty,
    )

    registry = load_prompt_registry()
    result = compile_for_agent(registry, "eli")
    dirty = is_dirty(registry, "eli", drafts={"eli_triage": "..."})
"""

from .blocks import (
    PromptBlock,
    PromptRegistry,
    PromptScope,
)

from .registry import (
    load_baseline_registry,
    load_prompt_registry,
    load_registry_from_file,
    parse_registry,
    validate_registry,
)

from .resolver import (
    resolve_for_agent,
    resolve_for_skillpack,
    split_agent_blocks,
)

from .drafts import (
    apply_drafts,
    dirty_block_ids,
    effective_content,
    has_drafts,
)

from .compiler import (
    BLOCK_SEPARATOR,
    SECTION_MARKER,
    CompiledPrompt,
    compile_block,
    compile_blocks,
    compile_for_agent,
    compile_for_skillpack,
    compile_sectioned,
    is_dirty,
    summarize_block,
)

from .tokens import (
    CHARS_PER_TOKEN,
    TokenBudget,
    estimate_tokens,
    token_budget,
)

from .fingerprint import (
    EMPTY_FINGERPRINT,
    fingerprint,
)

__all__ = [
    # Blocks
    "PromptBlock",
    "PromptRegistry",
    "PromptScope",
    # Registry
    "load_baseline_registry",
    "load_prompt_registry",
    "load_registry_from_file",
    "parse_registry",
    "validate_registry",
    # Resolver
    "resolve_for_agent",
    "resolve_for_skillpack",
    "split_agent_blocks",
    # Drafts
    "apply_drafts",
    "dirty_block_ids",
    "effective_content",
    "has_drafts",
    # Compiler
    "BLOCK_SEPARATOR",
    "SECTION_MARKER",
    "CompiledPrompt",
    "compile_block",
    "compile_blocks",
    "compile_for_agent",
    "compile_for_skillpack",
    "compile_sectioned",
    "is_dirty",
    "summarize_block",
    # Tokens / fingerprint
    "CHARS_PER_TOKEN",
    "TokenBudget",
    "estimate_tokens",
    "token_budget",
    "EMPTY_FINGERPRINT",
    "fingerprint",
]
