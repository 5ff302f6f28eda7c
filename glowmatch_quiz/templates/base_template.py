"""
Base template protocol for quiz documents.
All templates produce JSON-serializable dictionaries.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DocumentTemplate(ABC):
    """
    Base template protocol. Turns quiz records into JSON-serializable documents.
    """

    @abstractmethod
    def render(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Transform input data into a structured JSON-serializable output.

        Args:
            data: Input data dictionary

        Returns:
            JSON-serializable dictionary
        """

    def validate_required_fields(self, data: Dict[str, Any], required_fields: List[str]) -> None:
        """
        Raises:
            ValueError: If any required field is missing
        """
        missing = [name for name in required_fields if name not in data]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
