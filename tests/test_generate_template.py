# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from nhcal_lib.core.error import TemplateError
from nhcal_lib.generate import Template
from nhcal_lib.generate.template import SLOT_PATTERN


def test_slots_are_collected():
    template = Template("test", "cd @OUTPUT_DIR@ && run @EXECUTABLE@ @EXECUTABLE@")
    assert template.slots == frozenset({"OUTPUT_DIR", "EXECUTABLE"})


def test_render_fills_every_occurrence():
    template = Template("test", "@A@-@B@-@A@")
    assert template.render({"A": 1, "B": "x"}) == "1-x-1"


def test_render_missing_slot_raises():
    template = Template("test", "@A@ @B@")

    with pytest.raises(TemplateError, match="unfilled slots: B"):
        template.render({"A": "value"})


def test_render_unknown_slot_raises():
    template = Template("test", "@A@")

    with pytest.raises(TemplateError, match="no slots named: C"):
        template.render({"A": "value", "C": "value"})


def test_render_leftover_token_raises():
    template = Template("test", "@A@")

    with pytest.raises(TemplateError, match="unresolved tokens after rendering: B"):
        template.render({"A": "@B@"})


def test_render_ignores_lowercase_and_email_like_text():
    text = "mail user@example.org and $(Cluster) and ${PARTICLE}"
    template = Template("test", text)

    assert template.slots == frozenset()
    assert template.render({}) == text


def test_slot_pattern():
    assert SLOT_PATTERN.findall("@ONE@ @TWO_2@ @three@ @_X@") == ["ONE", "TWO_2"]
