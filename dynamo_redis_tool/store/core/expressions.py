"""
Expression building for DynamoDB requests.

An ExpressionBuilder collects, for a single request, the condition clauses,
filter clauses, update clauses and projection along with the placeholder
names and values they reference. Only placeholders that were actually used
end up in the request, which DynamoDB insists on.
"""

from types import MappingProxyType
from typing import Any

from ..constants import (
    ATTR_FIELDS,
    ATTR_PK,
    ATTR_SCORE_KEY,
    ATTR_SK,
    ATTR_TTL,
    ATTR_TYPE,
    ATTR_VALUE,
)

# Placeholder for every attribute the datastore references in an expression.
# Several of these ("value", "type", "ttl") are DynamoDB reserved words.
ATTRIBUTE_PLACEHOLDERS = MappingProxyType(
    {
        ATTR_PK: "#pk",
        ATTR_SK: "#sk",
        ATTR_VALUE: "#value",
        ATTR_TYPE: "#type",
        ATTR_TTL: "#ttl",
        ATTR_SCORE_KEY: "#score_key",
        ATTR_FIELDS: "#fields",
    }
)

UPDATE_VERBS = ("SET", "REMOVE", "ADD", "DELETE")


class ExpressionBuilder:
    """Accumulates expression clauses and placeholders for one request."""

    def __init__(self) -> None:
        self.conditions: list[str] = []
        self.filters: list[str] = []
        self.clauses: dict[str, list[str]] = {}
        self.projection: list[str] = []
        self.names: dict[str, str] = {}
        self.values: dict[str, dict[str, Any]] = {}

    def name(self, attribute: str) -> str:
        """
        Register an attribute name and return its placeholder.

        Registering the same attribute again returns the same placeholder.

        Raises:
            KeyError: If the attribute has no placeholder
        """
        placeholder = ATTRIBUTE_PLACEHOLDERS[attribute]
        self.names[placeholder] = attribute
        return placeholder

    def value(self, label: str, attribute_value: dict[str, Any]) -> str:
        """
        Register a literal value under a label and return its placeholder.

        Raises:
            ValueError: If the label is already bound to a different value
        """
        placeholder = f":{label}"
        existing = self.values.get(placeholder)
        if existing is not None and existing != attribute_value:
            raise ValueError(f"Placeholder {placeholder} already bound to another value")
        self.values[placeholder] = attribute_value
        return placeholder

    # Conditions

    def condition(self, clause: str) -> "ExpressionBuilder":
        self.conditions.append(clause)
        return self

    def condition_exists(self, attribute: str = ATTR_PK) -> "ExpressionBuilder":
        return self.condition(f"attribute_exists({self.name(attribute)})")

    def condition_not_exists(self, attribute: str = ATTR_PK) -> "ExpressionBuilder":
        return self.condition(f"attribute_not_exists({self.name(attribute)})")

    def condition_compare(
        self,
        attribute: str,
        operator: str,
        attribute_value: dict[str, Any],
        label: str | None = None,
    ) -> "ExpressionBuilder":
        """Add ``attribute <operator> value``, e.g. ``#value < :value``."""
        placeholder = self.value(label or attribute, attribute_value)
        return self.condition(f"{self.name(attribute)} {operator} {placeholder}")

    def condition_equals(
        self, attribute: str, attribute_value: dict[str, Any], label: str | None = None
    ) -> "ExpressionBuilder":
        return self.condition_compare(attribute, "=", attribute_value, label)

    def condition_between(
        self, attribute: str, start: dict[str, Any], stop: dict[str, Any]
    ) -> "ExpressionBuilder":
        return self.condition(
            f"{self.name(attribute)} BETWEEN {self.value('start', start)}"
            f" AND {self.value('stop', stop)}"
        )

    # Filters

    def filter_equals(
        self, attribute: str, attribute_value: dict[str, Any], label: str | None = None
    ) -> "ExpressionBuilder":
        placeholder = self.value(label or attribute, attribute_value)
        self.filters.append(f"{self.name(attribute)} = {placeholder}")
        return self

    # Updates

    def update(self, verb: str, clause: str) -> "ExpressionBuilder":
        if verb not in UPDATE_VERBS:
            raise ValueError(f"Unsupported update verb: {verb}")
        self.clauses.setdefault(verb, []).append(clause)
        return self

    def update_set(
        self, attribute: str, attribute_value: dict[str, Any], label: str | None = None
    ) -> "ExpressionBuilder":
        placeholder = self.value(label or attribute, attribute_value)
        return self.update("SET", f"{self.name(attribute)} = {placeholder}")

    def update_add(
        self, attribute: str, attribute_value: dict[str, Any], label: str = "delta"
    ) -> "ExpressionBuilder":
        return self.update("ADD", f"{self.name(attribute)} {self.value(label, attribute_value)}")

    def update_remove(self, attribute: str) -> "ExpressionBuilder":
        return self.update("REMOVE", self.name(attribute))

    def project(self, *attributes: str) -> "ExpressionBuilder":
        for attribute in attributes:
            placeholder = self.name(attribute)
            if placeholder not in self.projection:
                self.projection.append(placeholder)
        return self

    # Rendering

    # Clauses are joined with AND as given; a clause containing OR must
    # bring its own parentheses. Key conditions do not accept parentheses.

    def condition_expression(self) -> str | None:
        if not self.conditions:
            return None
        return " AND ".join(self.conditions)

    def filter_expression(self) -> str | None:
        if not self.filters:
            return None
        return " AND ".join(self.filters)

    def update_expression(self) -> str | None:
        if not self.clauses:
            return None
        return " ".join(
            f"{verb} {', '.join(self.clauses[verb])}"
            for verb in UPDATE_VERBS
            if verb in self.clauses
        )

    def projection_expression(self) -> str | None:
        if not self.projection:
            return None
        return ", ".join(self.projection)

    def expression_attribute_names(self) -> dict[str, str] | None:
        return dict(self.names) if self.names else None

    def expression_attribute_values(self) -> dict[str, dict[str, Any]] | None:
        return dict(self.values) if self.values else None

    def _placeholder_kwargs(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        names = self.expression_attribute_names()
        values = self.expression_attribute_values()
        if names:
            kwargs["ExpressionAttributeNames"] = names
        if values:
            kwargs["ExpressionAttributeValues"] = values
        return kwargs

    def write_kwargs(self) -> dict[str, Any]:
        """Request arguments for put/update/delete and transaction actions."""
        kwargs: dict[str, Any] = {}
        condition = self.condition_expression()
        update = self.update_expression()
        if condition:
            kwargs["ConditionExpression"] = condition
        if update:
            kwargs["UpdateExpression"] = update
        return self._placeholder_kwargs(kwargs)

    def query_kwargs(self) -> dict[str, Any]:
        """Request arguments for a query; conditions form the key condition."""
        kwargs: dict[str, Any] = {}
        key_condition = self.condition_expression()
        filter_expression = self.filter_expression()
        projection = self.projection_expression()
        if key_condition:
            kwargs["KeyConditionExpression"] = key_condition
        if filter_expression:
            kwargs["FilterExpression"] = filter_expression
        if projection:
            kwargs["ProjectionExpression"] = projection
        return self._placeholder_kwargs(kwargs)

    def projection_kwargs(self) -> dict[str, Any]:
        """Request arguments for get_item and transactional gets."""
        kwargs: dict[str, Any] = {}
        projection = self.projection_expression()
        if projection:
            kwargs["ProjectionExpression"] = projection
        return self._placeholder_kwargs(kwargs)
