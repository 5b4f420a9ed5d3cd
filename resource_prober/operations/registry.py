"""
Operation registry - definition storage only (stateless).

The registry stores operation class definitions and provides name lookup.
It does NOT hold operation instances; the prober instantiates a fresh
operation per run, so multiple probers can coexist without shared state.
"""

import inspect
from typing import Dict, List, Type

from .base import Operation


class OperationRegistry:
    """
    Stateless registry of operation definitions.

    Responsibilities:
    - Store operation class definitions (not instances)
    - Provide name-based lookup
    - Validate operation implementations
    - Suggest close matches for misspelled names
    """

    def __init__(self):
        # Map: operation_name -> Operation class (not instance!)
        self._definitions: Dict[str, Type[Operation]] = {}

    def register(self, operation_class: Type[Operation]) -> Type[Operation]:
        """
        Register an operation definition.

        Returns the class unchanged so it can be used as a decorator.

        Raises:
            TypeError: If not an Operation subclass
            ValueError: If the name is invalid or already registered
        """
        if not inspect.isclass(operation_class):
            raise TypeError(
                f"register() expects a class, got instance: {operation_class}. "
                "Did you mean to pass the class instead of an instance?"
            )
        if not issubclass(operation_class, Operation):
            raise TypeError(f"{operation_class.__name__} is not an Operation subclass")

        name = operation_class.name
        if not name or not name.replace("_", "").isalnum():
            raise ValueError(
                f"Operation name must be alphanumeric + underscores, got: '{name}'"
            )

        if name in self._definitions:
            existing_class = self._definitions[name]
            if existing_class is not operation_class:
                raise ValueError(
                    f"Operation '{name}' already registered by {existing_class.__name__}. "
                    f"Cannot register {operation_class.__name__}."
                )
            return operation_class

        self._definitions[name] = operation_class
        return operation_class

    def get(self, name: str) -> Type[Operation]:
        """
        Get operation class by name.

        Raises:
            ValueError: If operation not found
        """
        if name not in self._definitions:
            available = ", ".join(self.list_available())
            suggestions = self.suggest_similar(name)
            hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
            raise ValueError(
                f"Unknown operation '{name}'.{hint} Available operations: {available}"
            )
        return self._definitions[name]

    def create(self, name: str, **kwargs) -> Operation:
        """Instantiate a registered operation"""
        return self.get(name)(**kwargs)

    def list_available(self) -> List[str]:
        """Sorted list of registered operation names"""
        return sorted(self._definitions.keys())

    def is_registered(self, name: str) -> bool:
        """Check if an operation is registered"""
        return name in self._definitions

    def suggest_similar(self, name: str, max_suggestions: int = 2) -> List[str]:
        """
        Suggest registered names close to ``name`` (edit distance <= 3).
        """
        def distance(s1: str, s2: str) -> int:
            """Simple Levenshtein distance"""
            if len(s1) < len(s2):
                return distance(s2, s1)
            if len(s2) == 0:
                return len(s1)

            previous_row = range(len(s2) + 1)
            for i, c1 in enumerate(s1):
                current_row = [i + 1]
                for j, c2 in enumerate(s2):
                    insertions = previous_row[j + 1] + 1
                    deletions = current_row[j] + 1
                    substitutions = previous_row[j] + (c1 != c2)
                    current_row.append(min(insertions, deletions, substitutions))
                previous_row = current_row

            return previous_row[-1]

        scored = sorted(
            (distance(name.lower(), candidate.lower()), candidate)
            for candidate in self._definitions
        )
        return [candidate for score, candidate in scored if score <= 3][:max_suggestions]


# Global registry - definition storage only, no active state
OPERATION_REGISTRY = OperationRegistry()
