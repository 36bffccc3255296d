"""Prompt registry loading and validation.

The prompt registry is the block store the compiler reads from. It is a YAML
document with three sections:

    version: "1.0"
    shared_blocks:
      - id: shared_identity
        name: Identity & Brand
        file_path: prompts/shared/identity.prompt.md
        content: |-
          You are an AI staff member...
    agent_overlays:
      eli:
        - id: eli_triage
          ...
    skillpack_prompts:
      eli_inbox:
        - id: eip_classification
          ...

A block's scope comes from the section it is listed in. An explicit `scope`
key is kept as declared so that validate_registry can report a mismatch.

Resolution of which file to load (highest to lowest priority):
1. Explicit path argument
2. STAFFDESK_PROMPT_REGISTRY / prompts.registry_path (see runtime_config)
3. Baseline registry bundled with the package (staffdesk/prompts/registry.yaml)

Usage:
    from staffdesk.prompts.registry import load_prompt_registry, validate_registry

    registry = load_prompt_registry()
    result = validate_registry(registry)
    if result.has_errors():
        print(result.format_report())
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from staffdesk.config.runtime_config import get_registry_path
from staffdesk.prompts.blocks import PromptBlock, PromptRegistry, PromptScope
from staffdesk.validator.errors import ValidationResult

logger = logging.getLogger(__name__)


# =============================================================================
# Registry Loading
# =============================================================================


def _parse_scope(value: Any, default: PromptScope, location: str) -> PromptScope:
    if value is None:
        return default
    try:
        return PromptScope(value)
    except ValueError:
        logger.warning(
            "Unknown scope %r at %s; using section scope '%s'",
            value,
            location,
            default.value,
        )
        return default


def _parse_block(data: Any, scope: PromptScope, location: str) -> Optional[PromptBlock]:
    """Parse a single block entry from YAML data."""
    if not isinstance(data, dict):
        logger.warning("Skipping non-mapping block entry at %s", location)
        return None

    block_id = data.get("id")
    return PromptBlock(
        id=str(block_id) if block_id is not None else "",
        name=str(data.get("name") or block_id or ""),
        scope=_parse_scope(data.get("scope"), scope, location),
        # Stored as-is; non-string content is reported by validate_registry
        content=data.get("content", ""),
        file_path=data.get("file_path"),
    )


def _parse_block_list(data: Any, scope: PromptScope, location: str) -> Tuple[PromptBlock, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        logger.warning("Expected a list of blocks at %s, got %s", location, type(data).__name__)
        return ()

    blocks: List[PromptBlock] = []
    for index, entry in enumerate(data):
        block = _parse_block(entry, scope, f"{location}[{index}]")
        if block is not None:
            blocks.append(block)
    return tuple(blocks)


def _parse_keyed_collections(
    data: Any, scope: PromptScope, section: str
) -> Dict[str, Tuple[PromptBlock, ...]]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Expected a mapping at %s, got %s", section, type(data).__name__)
        return {}
    return {
        str(key): _parse_block_list(blocks, scope, f"{section}.{key}")
        for key, blocks in data.items()
    }


def parse_registry(data: Optional[Dict[str, Any]], source: Optional[str] = None) -> PromptRegistry:
    """Build a PromptRegistry from already-parsed YAML/JSON data."""
    if not data:
        # Empty registry is valid - no blocks anywhere
        return PromptRegistry(source=source)

    return PromptRegistry(
        shared_blocks=_parse_block_list(
            data.get("shared_blocks"), PromptScope.SHARED, "shared_blocks"
        ),
        agent_overlays=_parse_keyed_collections(
            data.get("agent_overlays"), PromptScope.AGENT, "agent_overlays"
        ),
        skillpack_prompts=_parse_keyed_collections(
            data.get("skillpack_prompts"), PromptScope.SKILLPACK, "skillpack_prompts"
        ),
        version=str(data.get("version", "1.0")),
        source=source,
    )


def load_registry_from_file(path: Path) -> Optional[PromptRegistry]:
    """Load a prompt registry from a YAML file.

    Args:
        path: Path to the registry YAML file.

    Returns:
        Parsed PromptRegistry, or None if the file doesn't exist or is invalid.
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Failed to load prompt registry from %s: %s", path, e)
        return None

    if data is not None and not isinstance(data, dict):
        logger.warning(
            "Prompt registry %s must be a mapping, got %s", path, type(data).__name__
        )
        return None

    registry = parse_registry(data, source=str(path))
    logger.debug(
        "Loaded prompt registry from %s (%d blocks)", path, registry.block_count()
    )
    return registry


def get_baseline_registry_path() -> Path:
    """Get path to the baseline registry bundled with the package."""
    return Path(__file__).parent / "registry.yaml"


def load_baseline_registry() -> PromptRegistry:
    """Load the baseline registry that ships with the package.

    Returns:
        The baseline PromptRegistry. Returns an empty registry if the baseline
        file is missing or unreadable.
    """
    path = get_baseline_registry_path()
    registry = load_registry_from_file(path)
    if registry is None:
        logger.warning("Baseline prompt registry not found at %s, using empty registry", path)
        return PromptRegistry(source=str(path))
    return registry


def load_prompt_registry(path: Optional[Path] = None) -> PromptRegistry:
    """Load the effective prompt registry.

    Falls back to the baseline registry when the requested or configured
    file cannot be loaded.
    """
    if path is None:
        path = get_registry_path()
    if path is None:
        return load_baseline_registry()

    registry = load_registry_from_file(path)
    if registry is None:
        logger.warning("Prompt registry %s could not be loaded, using baseline", path)
        return load_baseline_registry()
    return registry


# =============================================================================
# Registry Validation
# =============================================================================


def _located_blocks(registry: PromptRegistry) -> List[Tuple[str, int, PromptScope, PromptBlock]]:
    """Flatten the registry into (section, position, expected scope, block)."""
    located = [
        ("shared_blocks", i, PromptScope.SHARED, block)
        for i, block in enumerate(registry.shared_blocks)
    ]
    for agent_id, blocks in registry.agent_overlays.items():
        located.extend(
            (f"agent_overlays.{agent_id}", i, PromptScope.AGENT, block)
            for i, block in enumerate(blocks)
        )
    for skillpack_id, blocks in registry.skillpack_prompts.items():
        located.extend(
            (f"skillpack_prompts.{skillpack_id}", i, PromptScope.SKILLPACK, block)
            for i, block in enumerate(blocks)
        )
    return located


def validate_registry(registry: PromptRegistry) -> ValidationResult:
    """Check a registry for data-integrity faults.

    Errors: missing ids, ids duplicated across any scopes, a block whose scope
    disagrees with the section holding it, non-string content.
    Warnings: blocks with empty or whitespace-only content, agents or
    skillpacks listed with no blocks.
    """
    result = ValidationResult()
    located = _located_blocks(registry)
    id_counts = Counter(block.id for _, _, _, block in located if block.id)
    reported_duplicates = set()

    for section, position, expected_scope, block in located:
        if not block.id:
            result.add_error(
                "MISSING_ID",
                section,
                "block has no id",
                "give the block a unique, stable id",
                position=position,
            )
        elif id_counts[block.id] > 1 and block.id not in reported_duplicates:
            reported_duplicates.add(block.id)
            result.add_error(
                "DUPLICATE_ID",
                section,
                f"block id '{block.id}' appears {id_counts[block.id]} times",
                "rename one of the blocks; ids must be unique across all scopes",
                block_id=block.id,
                position=position,
            )

        if block.scope is not expected_scope:
            result.add_error(
                "SCOPE_MISMATCH",
                section,
                f"block '{block.id}' has scope '{block.scope.value}' "
                f"but is listed under {section.split('.')[0]}",
                f"move the block or set scope to '{expected_scope.value}'",
                block_id=block.id,
                position=position,
            )

        if not isinstance(block.content, str):
            result.add_error(
                "INVALID_CONTENT",
                section,
                f"block '{block.id}' content is {type(block.content).__name__}, not text",
                "store the block body as a string",
                block_id=block.id,
                position=position,
            )
        elif not block.content.strip():
            result.add_warning(
                "EMPTY_CONTENT",
                section,
                f"block '{block.id}' has no content",
                "add content or remove the block",
                block_id=block.id,
                position=position,
            )

    for section, collections in (
        ("agent_overlays", registry.agent_overlays),
        ("skillpack_prompts", registry.skillpack_prompts),
    ):
        for key, blocks in collections.items():
            if not blocks:
                result.add_warning(
                    "EMPTY_COLLECTION",
                    f"{section}.{key}",
                    "has no blocks",
                    "add blocks or drop the entry",
                )

    return result
