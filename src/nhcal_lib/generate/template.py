# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from collections.abc import Mapping

from nhcal_lib.core.error import TemplateError

# Matches a slot token, e.g. '@OUTPUT_DIR@'.
SLOT_PATTERN = re.compile(r"@([A-Z][A-Z0-9_]*)@")


class Template:
    """
    Text template with a closed set of named slots.

    Slots are written as `@NAME@` tokens. Rendering requires a value for every
    declared slot, rejects values for undeclared slots, and verifies that no
    slot token is left in the rendered text.
    """

    def __init__(self, name: str, text: str):
        """
        Initialize the template.

        Args:
            name (str): Name of the template used in error messages.
            text (str): Text of the template. The declared slots are all `@NAME@`
                tokens found in it.
        """
        self._name = name
        self._text = text
        self._slots = frozenset(SLOT_PATTERN.findall(text))

    @property
    def slots(self) -> frozenset[str]:
        """Names of the slots of the template."""
        return self._slots

    def render(self, values: Mapping[str, object]) -> str:
        """
        Fill all slots of the template.

        Args:
            values (Mapping[str, object]): Value for every slot. Values are converted to strings.

        Returns:
            str: The rendered text.

        Raises:
            TemplateError: If a slot has no value, a value does not belong to any slot,
                or a slot token remains in the rendered text.
        """
        if missing := self._slots - values.keys():
            raise TemplateError(
                f"Template '{self._name}' has unfilled slots: {', '.join(sorted(missing))}."
            )

        if unknown := values.keys() - self._slots:
            raise TemplateError(
                f"Template '{self._name}' has no slots named: {', '.join(sorted(unknown))}."
            )

        # single pass so that slot-like text inside values is never substituted
        rendered = SLOT_PATTERN.sub(lambda m: str(values[m.group(1)]), self._text)

        if leftover := SLOT_PATTERN.findall(rendered):
            raise TemplateError(
                f"Template '{self._name}' contains unresolved tokens after rendering: "
                f"{', '.join(sorted(set(leftover)))}."
            )

        return rendered
