"""Base class for registered update definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from vibes_update.core.models import AnalysisResult, ComparisonResult


class UpdateDefinition(ABC):
    """A named, stateless transformation of artifact text.

    ``apply`` must depend only on its arguments: no clock, randomness or
    filesystem access. It returns the new text or raises
    :class:`~vibes_update.core.errors.UpdateExecutionError`.
    """

    id: str = ""
    name: str = ""
    description: str = ""

    @abstractmethod
    def apply(self, text: str, analysis: AnalysisResult, comparison: ComparisonResult) -> str:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
