"""Pipeline result model."""

from dataclasses import dataclass, field


@dataclass
class ProcessResult:
    """Outcome of running the selection pipeline on one descriptor."""

    removed: int = 0  # streams newly marked deleted
    reordered: list[str] = field(default_factory=list)  # stream kinds whose order changed
    defaults_changed: int = 0
    parse_issues: int = 0
    default_language: str = ""  # resolved target, "" when resolution did not run

    @property
    def changed(self) -> bool:
        """Whether the pipeline modified any stream."""
        return bool(self.removed or self.reordered or self.defaults_changed)

    def __str__(self) -> str:
        """Human-readable representation."""
        if not self.changed:
            return "No changes"
        parts = []
        if self.removed:
            parts.append(f"{self.removed} removed")
        if self.reordered:
            parts.append(f"reordered {', '.join(self.reordered)}")
        if self.defaults_changed:
            parts.append(f"{self.defaults_changed} default flag(s) changed")
        return "; ".join(parts)
