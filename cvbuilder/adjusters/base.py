"""
Base interface for CV adjusters.

Defines the contract for pluggable CV adjustment implementations.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict

from ..shared import UnitOfWork


class CVAdjuster(ABC):
    """
    Abstract base class for CV adjusters.

    Implementations rewrite CV content (wording, ordering, emphasis) for a
    purpose such as a specific job offer. The layout engine never sees
    them: they run before rendering, JSON in and JSON out.
    """

    @abstractmethod
    def name(self) -> str:
        """
        Return the unique name/identifier for this adjuster.

        Returns:
            String identifier used in CLI (e.g., "openai-tailoring")
        """
        ...

    @abstractmethod
    def description(self) -> str:
        """
        Return a human-readable description of this adjuster.
        """
        ...

    @abstractmethod
    def adjust(self, work: UnitOfWork, **kwargs) -> UnitOfWork:
        """
        Adjust CV data based on the adjuster's specific logic.

        Args:
            work: UnitOfWork with input/output paths and config. Adjusters load JSON from work.input
            **kwargs: Adjuster-specific parameters (e.g., job_url, requirements)

        Returns:
            UnitOfWork with output updated to the adjusted JSON file.

        Raises:
            ValueError: If required parameters are missing or invalid
        """
        ...

    def _load_input_json(self, work: UnitOfWork) -> Dict[str, Any]:
        with work.input.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write_output_json(self, work: UnitOfWork, data: Dict[str, Any]) -> UnitOfWork:
        work.output.parent.mkdir(parents=True, exist_ok=True)
        with work.output.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        return replace(work, output=work.output)

    def validate_params(self, **kwargs) -> None:
        """
        Validate that required parameters are present.

        Override this method to validate adjuster-specific parameters.

        Raises:
            ValueError: If required parameters are missing or invalid
        """
        ...
