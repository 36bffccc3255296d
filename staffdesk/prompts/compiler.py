"""
compiler.py - Compile an agent's effective system prompt from prompt blocks.

This module provides prompt compilation functionality that:
- Resolves the ordered blocks for an agent (shared first, then overlays)
  or for a skillpack
- Substitutes caller-supplied drafts without touching the registry
- Joins block contents with a fixed separator, optionally split into a
  shared section and an agent-specific section
- Reports a token estimate and a fingerprint of the compiled text

Nothing is cached: every call recomputes from the registry snapshot it is
given, so identical inputs always produce identical output.

Usage:
    from staffdesk.prompts.compiler import compile_for_agent
    from staffdesk.prompts.registry import load_prompt_registry

    registry = load_prompt_registry()
    result = compile_for_agent(registry, "eli", drafts={"eli_triage": "..."})
    print(result.fingerprint, result.token_estimate)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from staffdesk.config.runtime_config import get_skillpack_summary_lines, get_summary_lines
from staffdesk.prompts.blocks import PromptBlock, PromptRegistry, PromptScope
from staffdesk.prompts.drafts import Drafts, apply_drafts, effective_content
from staffdesk.prompts.fingerprint import fingerprint
from staffdesk.prompts.resolver import (
    resolve_for_agent,
    resolve_for_skillpack,
    split_agent_blocks,
)
from staffdesk.prompts.tokens import estimate_tokens

logger = logging.getLogger(__name__)

# Separator between consecutive blocks
BLOCK_SEPARATOR = "\n\n---\n\n"

# Divider between the shared section and the agent-specific section
SECTION_MARKER = "\n\n===== AGENT-SPECIFIC =====\n\n"

KIND_AGENT = "agent"
KIND_SKILLPACK = "skillpack"
KIND_BLOCK = "block"


@dataclass(frozen=True)
class CompiledPrompt:
    """Result of prompt compilation with metadata."""

    ordered_blocks: Tuple[PromptBlock, ...]  # Resolved blocks, drafts applied
    compiled_text: str
    token_estimate: int
    fingerprint: str  # Short hash of compiled_text for change detection
    subject_id: Optional[str] = None  # Agent, skillpack or block id
    kind: str = KIND_AGENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "subject_id": self.subject_id,
            "ordered_blocks": [block.to_dict() for block in self.ordered_blocks],
            "compiled_text": self.compiled_text,
            "token_estimate": self.token_estimate,
            "fingerprint": self.fingerprint,
        }


# =============================================================================
# Joining
# =============================================================================


def _join(blocks: Sequence[PromptBlock]) -> str:
    return BLOCK_SEPARATOR.join(effective_content(block) for block in blocks)


def compile_blocks(blocks: Sequence[PromptBlock]) -> str:
    """Join block contents with BLOCK_SEPARATOR.

    An empty sequence compiles to an empty string.
    """
    return _join(blocks)


def compile_sectioned(
    shared_blocks: Sequence[PromptBlock],
    agent_blocks: Sequence[PromptBlock],
) -> str:
    """Join shared and agent-specific blocks as two labelled sections.

    The agent section (and SECTION_MARKER) is only emitted when it has
    content; otherwise the shared section is returned alone.
    """
    shared_text = _join(shared_blocks)
    agent_text = _join(agent_blocks)
    if not agent_text:
        return shared_text
    return f"{shared_text}{SECTION_MARKER}{agent_text}"


def _build_result(
    blocks: Sequence[PromptBlock],
    text: str,
    subject_id: Optional[str],
    kind: str,
) -> CompiledPrompt:
    return CompiledPrompt(
        ordered_blocks=tuple(blocks),
        compiled_text=text,
        token_estimate=estimate_tokens(text),
        fingerprint=fingerprint(text),
        subject_id=subject_id,
        kind=kind,
    )


# =============================================================================
# Entry points
# =============================================================================


def compile_for_agent(
    registry: PromptRegistry,
    agent_id: Optional[str],
    drafts: Optional[Drafts] = None,
    sectioned: bool = True,
) -> CompiledPrompt:
    """Compile an agent's system prompt.

    Args:
        registry: Block store snapshot.
        agent_id: Agent (staff) identifier. Unknown ids compile the shared
            blocks only.
        drafts: Optional block id -> content overrides. Drafts for blocks
            outside this agent's scope are ignored.
        sectioned: If True, separate shared and agent-specific content with
            SECTION_MARKER. If False, join all blocks with BLOCK_SEPARATOR.

    Returns:
        CompiledPrompt with ordered blocks, text, token estimate and fingerprint.

    Raises:
        TypeError: If a draft for an in-scope block is not a string.
    """
    ordered = apply_drafts(resolve_for_agent(registry, agent_id), drafts)

    if sectioned:
        shared, overlay = split_agent_blocks(registry, agent_id)
        text = compile_sectioned(ordered[: len(shared)], ordered[len(shared):])
        logger.debug(
            "Compiled agent %r: %d shared + %d overlay blocks",
            agent_id,
            len(shared),
            len(overlay),
        )
    else:
        text = compile_blocks(ordered)

    return _build_result(ordered, text, agent_id, KIND_AGENT)


def compile_for_skillpack(
    registry: PromptRegistry,
    skillpack_id: Optional[str],
    drafts: Optional[Drafts] = None,
) -> CompiledPrompt:
    """Compile a skillpack's prompt blocks (no shared blocks)."""
    ordered = apply_drafts(resolve_for_skillpack(registry, skillpack_id), drafts)
    return _build_result(ordered, compile_blocks(ordered), skillpack_id, KIND_SKILLPACK)


def compile_block(block: PromptBlock, drafts: Optional[Drafts] = None) -> CompiledPrompt:
    """Compile a single block, for per-block token and hash readouts."""
    (effective,) = apply_drafts([block], drafts)
    return _build_result([effective], compile_blocks([effective]), block.id, KIND_BLOCK)


def is_dirty(
    registry: PromptRegistry,
    agent_id: Optional[str],
    drafts: Optional[Drafts] = None,
) -> bool:
    """Check whether drafts change the agent's compiled prompt."""
    if not drafts:
        return False
    with_drafts = compile_for_agent(registry, agent_id, drafts)
    canonical = compile_for_agent(registry, agent_id)
    return with_drafts.fingerprint != canonical.fingerprint


def summarize_block(
    block: PromptBlock,
    drafts: Optional[Drafts] = None,
    max_lines: Optional[int] = None,
) -> str:
    """First non-blank lines of a block joined by spaces (summary card text).

    Skillpack cards show one line more than shared and agent cards.
    """
    if max_lines is None:
        if block.scope is PromptScope.SKILLPACK:
            max_lines = get_skillpack_summary_lines()
        else:
            max_lines = get_summary_lines()
    lines = [line for line in effective_content(block, drafts).split("\n") if line.strip()]
    return " ".join(lines[:max_lines])


# =============================================================================
# CLI entry point
# =============================================================================


def _load_drafts(specs: Optional[List[str]]) -> Dict[str, str]:
    """Parse --draft BLOCK_ID=PATH options into a drafts mapping."""
    drafts: Dict[str, str] = {}
    for spec in specs or []:
        block_id, sep, path = spec.partition("=")
        if not sep or not block_id or not path:
            raise ValueError(f"Invalid --draft value {spec!r}; expected BLOCK_ID=PATH")
        drafts[block_id] = Path(path).read_text(encoding="utf-8")
    return drafts


def main() -> None:
    """CLI entry point for prompt preview."""
    import argparse
    import json
    import sys

    from staffdesk.prompts.registry import (
        load_prompt_registry,
        load_registry_from_file,
        validate_registry,
    )
    from staffdesk.prompts.tokens import token_budget

    # Force UTF-8 output on Windows
    if sys.stdout.encoding != "utf-8":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
        except (AttributeError, OSError):
            pass

    parser = argparse.ArgumentParser(description="Preview compiled agent and skillpack prompts")
    parser.add_argument(
        "command",
        choices=["agent", "skillpack", "list", "validate"],
        help="Command to run",
    )
    parser.add_argument("--id", dest="subject_id", help="Agent or skillpack id")
    parser.add_argument("--registry", help="Prompt registry YAML file")
    parser.add_argument(
        "--draft",
        action="append",
        metavar="BLOCK_ID=PATH",
        help="Use the contents of PATH as a draft for BLOCK_ID (repeatable)",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Join agent blocks without the agent-specific section marker",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    parser.add_argument("--output", help="Output file for compiled prompt")

    args = parser.parse_args()

    if args.registry:
        registry = load_registry_from_file(Path(args.registry))
        if registry is None:
            print(f"ERROR: could not load prompt registry: {args.registry}")
            sys.exit(1)
    else:
        registry = load_prompt_registry()

    if args.command == "list":
        print(f"Shared blocks ({len(registry.shared_blocks)}):")
        for block in registry.shared_blocks:
            print(f"  {block.id}  {block.name}")
        print(f"\nAgents ({len(registry.agent_ids())}):")
        for agent_id in registry.agent_ids():
            print(f"  {agent_id}: {len(registry.overlay_for(agent_id))} blocks")
        print(f"\nSkillpacks ({len(registry.skillpack_ids())}):")
        for skillpack_id in registry.skillpack_ids():
            print(f"  {skillpack_id}: {len(registry.prompts_for(skillpack_id))} blocks")
        return

    if args.command == "validate":
        result = validate_registry(registry)
        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        elif result.has_errors() or result.has_warnings():
            print(result.format_report())
        if result.has_errors():
            if not args.json:
                print(f"Blocks with errors: {', '.join(result.block_ids_with_errors()) or '-'}")
            sys.exit(1)
        if not args.json:
            print(f"OK: {registry.block_count()} blocks, no integrity errors")
        return

    if not args.subject_id:
        print(f"ERROR: --id required for {args.command} command")
        sys.exit(1)

    try:
        drafts = _load_drafts(args.draft)
        if args.command == "agent":
            result = compile_for_agent(
                registry, args.subject_id, drafts, sectioned=not args.plain
            )
        else:
            result = compile_for_skillpack(registry, args.subject_id, drafts)
    except (OSError, ValueError, TypeError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"# {result.kind}: {result.subject_id}")
        print(f"# Blocks: {', '.join(b.id for b in result.ordered_blocks) or 'none'}")
        print(f"# Fingerprint: {result.fingerprint}")
        print(f"# Tokens: ~{token_budget(result.compiled_text).format()}")
        print()
        print(result.compiled_text)

    if args.output:
        Path(args.output).write_text(result.compiled_text, encoding="utf-8")
        print(f"\nWritten to: {args.output}")


if __name__ == "__main__":
    main()
