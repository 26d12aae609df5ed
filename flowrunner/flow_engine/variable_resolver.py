"""
Placeholder Resolver - Resolves {{path}} references against the execution context

Supports:
- {{user.name}} - dotted path into the context
- Nested paths and list indexes: {{order.items.0.sku}}
- Defaults: {{user.name | default: Guest}}
- Recursion into dicts and lists (same shape is rebuilt)

Resolution never fails: a reference that cannot be resolved becomes an
empty string.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from flowrunner.flow_engine.paths import get_path, is_absent

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = 'default:'


class PlaceholderResolver:
    """
    Resolves placeholder references in node parameters.

    Examples:
        "{{user.name}}"                      -> "Ann"
        "Hello {{user.name | default: Guest}}" -> "Hello Guest" (no user)
        "{{order.items}}"                    -> [...] (type preserved)
        "Total: {{order.total}}"             -> "Total: 12.5"
    """

    # Pattern to match {{ ... }}
    PLACEHOLDER_PATTERN = re.compile(r'\{\{([^}]*)\}\}')

    def resolve(self, template: Any, context: Any) -> Any:
        """
        Resolve placeholders in template (recursively handles dicts, lists, strings).

        Args:
            template: Value to resolve (string, dict, list, tuple or primitive)
            context: Execution context used as the lookup root

        Returns:
            Value with all {{placeholders}} resolved
        """
        if isinstance(template, str):
            return self._resolve_string(template, context)
        elif isinstance(template, Mapping):
            return {k: self.resolve(v, context) for k, v in template.items()}
        elif isinstance(template, list):
            return [self.resolve(item, context) for item in template]
        elif isinstance(template, tuple):
            return tuple(self.resolve(item, context) for item in template)
        else:
            # Primitive value (int, bool, None, etc)
            return template

    def _resolve_string(self, text: str, context: Any) -> Any:
        """
        Resolve placeholders in a string.

        If the ENTIRE string is a single placeholder, return the actual value.
        Otherwise, do string replacement.

        Examples:
            "{{order.total}}" -> 12.5 (float)
            "Total: {{order.total}}" -> "Total: 12.5" (string)
        """
        match = self.PLACEHOLDER_PATTERN.fullmatch(text)
        if match:
            value = self._resolve_placeholder(match.group(1), context)
            return '' if is_absent(value) else value

        def replace_placeholder(match):
            value = self._resolve_placeholder(match.group(1), context)
            return '' if is_absent(value) else _stringify(value)

        return self.PLACEHOLDER_PATTERN.sub(replace_placeholder, text)

    def _resolve_placeholder(self, expression: str, context: Any) -> Any:
        path, default = _split_expression(expression)
        value = get_path(context, path)

        if is_absent(value) and default is not None:
            return default

        return value

    def find_unresolved(self, template: Any, context: Any) -> List[str]:
        """
        List placeholder paths that resolve to nothing and have no default.

        Returns:
            List of unresolved paths (empty if all resolve)
        """
        unresolved = []

        def check_value(val):
            if isinstance(val, str):
                for match in self.PLACEHOLDER_PATTERN.finditer(val):
                    path, default = _split_expression(match.group(1))
                    if default is None and is_absent(get_path(context, path)):
                        unresolved.append(path)
            elif isinstance(val, Mapping):
                for v in val.values():
                    check_value(v)
            elif isinstance(val, (list, tuple)):
                for item in val:
                    check_value(item)

        check_value(template)
        return unresolved


def _split_expression(expression: str) -> Tuple[str, Optional[str]]:
    """Split "path | default: literal" into (path, literal or None)."""
    parts = [part.strip() for part in expression.split('|')]
    path = parts[0]

    default = None
    if len(parts) > 1 and parts[1].startswith(DEFAULT_PREFIX):
        default = parts[1][len(DEFAULT_PREFIX):].strip()

    return path, default


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            logger.debug(f"Could not serialize placeholder value of type {type(value).__name__}")
            return str(value)
    return str(value)
