# staffdesk/validator/errors.py
"""Registry validation issue collection and formatting."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

# Issue message template: [FAIL] TYPE: location problem -> Fix: action
ERROR_TEMPLATE = "[FAIL] {error_type}: {location} {problem}\n  Fix: {fix_action}"
WARNING_TEMPLATE = "[WARN] {error_type}: {location} {problem}\n  Fix: {fix_action}"


class ValidationError:
    """A data-integrity issue found in one registry section.

    `section` is the collection holding the block (``shared_blocks`` or
    ``agent_overlays.eli``); `position` is the block's index in it, or None
    when the issue concerns the whole collection.
    """

    def __init__(
        self,
        error_type: str,
        section: str,
        problem: str,
        fix_action: str,
        block_id: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.error_type = error_type
        self.section = section
        self.problem = problem
        self.fix_action = fix_action
        self.block_id = block_id
        self.position = position

    @property
    def location(self) -> str:
        """Section plus index, e.g. ``agent_overlays.eli[1]``."""
        if self.position is None:
            return self.section
        return f"{self.section}[{self.position}]"

    def format(self, template: str = ERROR_TEMPLATE) -> str:
        return template.format(
            error_type=self.error_type,
            location=self.location,
            problem=self.problem,
            fix_action=self.fix_action,
        )

    def sort_key(self) -> Tuple[str, int, str]:
        """Order by section name, then numeric block position.

        Collection-level issues (no position) sort ahead of the section's blocks.
        """
        position = -1 if self.position is None else self.position
        return (self.section, position, self.error_type)

    def to_dict(self) -> Dict[str, Any]:
        """Convert issue to dictionary for JSON serialization."""
        return {
            "type": self.error_type,
            "location": self.location,
            "section": self.section,
            "position": self.position,
            "block_id": self.block_id,
            "problem": self.problem,
            "fix_action": self.fix_action,
        }


class ValidationResult:
    """Registry issues split into errors (integrity faults) and warnings."""

    def __init__(self):
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []

    def add_error(
        self,
        error_type: str,
        section: str,
        problem: str,
        fix_action: str,
        block_id: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.errors.append(
            ValidationError(error_type, section, problem, fix_action, block_id, position)
        )

    def add_warning(
        self,
        error_type: str,
        section: str,
        problem: str,
        fix_action: str,
        block_id: Optional[str] = None,
        position: Optional[int] = None,
    ):
        """Add an authoring-guideline warning; it never fails validation."""
        self.warnings.append(
            ValidationError(error_type, section, problem, fix_action, block_id, position)
        )

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def sorted_errors(self) -> List[ValidationError]:
        return sorted(self.errors, key=lambda e: e.sort_key())

    def sorted_warnings(self) -> List[ValidationError]:
        return sorted(self.warnings, key=lambda w: w.sort_key())

    def block_ids_with_errors(self) -> List[str]:
        """Distinct ids of blocks carrying at least one error, in report order."""
        ids = (e.block_id for e in self.sorted_errors() if e.block_id)
        return list(dict.fromkeys(ids))

    def format_report(self) -> str:
        """Human-readable report: errors first, then warnings."""
        lines = [e.format() for e in self.sorted_errors()]
        lines.extend(w.format(WARNING_TEMPLATE) for w in self.sorted_warnings())
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON serialization."""
        return {
            "errors": [e.to_dict() for e in self.sorted_errors()],
            "warnings": [w.to_dict() for w in self.sorted_warnings()],
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "status": "FAIL" if self.has_errors() else "PASS",
        }
