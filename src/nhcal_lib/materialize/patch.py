# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from dataclasses import dataclass
from typing import Self

from nhcal_lib.core.error import PatchApplicationError

# Geometry source files edited by nhcal, relative to the EPIC source directory.
BACKWARD_HCAL_FILE = "compact/hcal/backward_template.xml"
DEFINITIONS_FILE = "compact/definitions.xml"


@dataclass(frozen=True)
class PatchEdit:
    """
    A single edit of a geometry source file.

    The `pattern` must contain one capturing group matching the text preceding
    the edited value; the matched value itself follows the group.
    """

    # Path of the edited file relative to the source directory.
    file: str

    # Name of the edited geometry parameter.
    parameter: str

    # Regular expression locating the value.
    pattern: str

    # New value.
    value: str

    @classmethod
    def attribute(cls, file: str, attribute: str, value: str) -> Self:
        """Create an edit replacing the whole value of an XML attribute."""
        return cls(file, attribute, rf'(\b{re.escape(attribute)}=")[^"]*', value)

    @classmethod
    def constant(cls, file: str, name: str, value: str) -> Self:
        """
        Create an edit replacing the numeric part of a compact constant.

        Units following the number (e.g. ' * cm') are kept.
        """
        return cls(
            file, name, rf'(name="{re.escape(name)}"\s*value=")[^\s*"]*', value
        )

    def apply(self, text: str) -> str:
        """
        Apply the edit to the content of the file.

        Args:
            text (str): Content of the file.

        Returns:
            str: The edited content.

        Raises:
            PatchApplicationError: If the pattern does not match anything.
        """
        edited, count = re.subn(
            self.pattern, lambda m: m.group(1) + self.value, text
        )
        if count == 0:
            raise PatchApplicationError(
                f"Could not set '{self.parameter}' to '{self.value}': "
                f"no match in '{self.file}'. The geometry source format may have changed."
            )

        return edited
