# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import patch

import pytest
import yaml

from nhcal_lib.core.config import DefaultParameters, EnvironmentVariables, LimitSettings
from nhcal_lib.core.error import (
    ConfigurationError,
    PatchApplicationError,
    ToolchainMissingError,
)
from nhcal_lib.materialize import ConfigMaterializer
from nhcal_lib.materialize.materializer import APPLIED_PATCHES_FILE
from nhcal_lib.materialize.patch import BACKWARD_HCAL_FILE, DEFINITIONS_FILE
from nhcal_lib.parameters import ParameterResolver
from nhcal_lib.toolchain import ToolchainComponent, ToolchainInstaller

BACKWARD_HCAL = """<lccdd>
  <define>
    <constant name="HcalEndcapNSteelThickness" value="4.0 * cm"/>
    <constant name="HcalEndcapNPolystyreneThickness" value="2.4 * cm"/>
  </define>
  <segmentation type="CartesianGridXY" grid_size_x="100 * mm" grid_size_y="100 * mm"/>
</lccdd>
"""

DEFINITIONS = """<define>
  <constant name="HcalEndcapN_length" value="65 * cm"/>
</define>
"""


class FakeInstaller(ToolchainInstaller):
    """Installer recording the builds and creating the marker file."""

    def __init__(self):
        self.built = []

    def fetch(self, component):
        raise AssertionError("working copies are never fetched")

    def build(self, component):
        self.built.append(component)
        component.marker_path.parent.mkdir(parents=True, exist_ok=True)
        component.marker_path.write_text("")


@pytest.fixture
def resolver():
    return ParameterResolver(DefaultParameters(), LimitSettings(), EnvironmentVariables())


@pytest.fixture
def base_epic(tmp_path):
    epic = ToolchainComponent("EPIC", tmp_path / "epic", "install/bin/thisepic.sh")
    (epic.source_dir / "compact" / "hcal").mkdir(parents=True)
    (epic.source_dir / BACKWARD_HCAL_FILE).write_text(BACKWARD_HCAL)
    (epic.source_dir / DEFINITIONS_FILE).write_text(DEFINITIONS)
    (epic.source_dir / "build").mkdir()
    (epic.source_dir / "build" / "CMakeCache.txt").write_text("")
    (epic.source_dir / ".git").mkdir()
    epic.marker_path.parent.mkdir(parents=True)
    epic.marker_path.write_text("")
    return epic


@pytest.fixture
def installer():
    return FakeInstaller()


@pytest.fixture
def materializer(installer, base_epic, resolver):
    return ConfigMaterializer(
        installer, base_epic, resolver.defaults(), ["build", "install", ".git"]
    )


def _resolve(resolver, tmp_path, env):
    params = resolver.resolve(env)
    return params, resolver.derive(params, tmp_path)


def test_requires_custom_build_defaults(materializer, resolver):
    assert not materializer.requiresCustomBuild(resolver.defaults())


@pytest.mark.parametrize(
    "env",
    [
        {"TILE_SIZE": "5"},
        {"ABSORBER_THICKNESS": "3"},
        {"SCINTILLATOR_THICKNESS": "2"},
        {"N_LAYERS": "8"},
    ],
)
def test_requires_custom_build_geometry_change(materializer, resolver, env):
    assert materializer.requiresCustomBuild(resolver.resolve(env))


@pytest.mark.parametrize(
    "env",
    [
        {"MOMENTUM": "5"},
        {"THETA": "160"},
        {"PARTICLE": "proton"},
        {"JOBS": "100"},
        {"ABSORBER_THICKNESS": "4.0"},
    ],
)
def test_requires_custom_build_no_geometry_change(materializer, resolver, env):
    assert not materializer.requiresCustomBuild(resolver.resolve(env))


def test_working_copy_keyed_by_detector_config(materializer, resolver, tmp_path):
    _, derived = _resolve(resolver, tmp_path, {"TILE_SIZE": "5"})
    work = materializer.workingCopy(derived)

    assert work.source_dir == derived.output_dir.parent / "epic"
    assert work.repository is None
    assert work.marker == "install/bin/thisepic.sh"


def test_patch_plan_tile_size(materializer, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {"TILE_SIZE": "5"})
    plan = materializer.patchPlan(params, derived)

    assert [(e.file, e.parameter, e.value) for e in plan] == [
        (BACKWARD_HCAL_FILE, "grid_size_x", "50 * mm"),
        (BACKWARD_HCAL_FILE, "grid_size_y", "50 * mm"),
    ]


def test_patch_plan_layers_only_changes_length(materializer, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})
    plan = materializer.patchPlan(params, derived)

    assert [(e.file, e.parameter, e.value) for e in plan] == [
        (DEFINITIONS_FILE, "HcalEndcapN_length", "52"),
    ]


def test_patch_plan_thicknesses(materializer, resolver, tmp_path):
    params, derived = _resolve(
        resolver,
        tmp_path,
        {"ABSORBER_THICKNESS": "3.5", "SCINTILLATOR_THICKNESS": "2.90"},
    )
    plan = materializer.patchPlan(params, derived)

    assert [(e.parameter, e.value) for e in plan] == [
        ("HcalEndcapNSteelThickness", "3.5"),
        ("HcalEndcapNPolystyreneThickness", "2.9"),
    ]


def test_materialize_defaults_uses_base(materializer, installer, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {})

    assert materializer.materialize(params, derived) is None
    assert installer.built == []
    assert not (derived.detector_dir / "epic").exists()


def test_materialize_custom_geometry(materializer, installer, resolver, tmp_path):
    params, derived = _resolve(
        resolver, tmp_path, {"TILE_SIZE": "5", "ABSORBER_THICKNESS": "3"}
    )

    work = materializer.materialize(params, derived)

    assert work is not None
    assert installer.built == [work]
    assert work.marker_path.is_file()

    backward = (work.source_dir / BACKWARD_HCAL_FILE).read_text()
    assert 'grid_size_x="50 * mm"' in backward
    assert 'grid_size_y="50 * mm"' in backward
    assert 'name="HcalEndcapNSteelThickness" value="3 * cm"' in backward

    definitions = (work.source_dir / DEFINITIONS_FILE).read_text()
    assert 'name="HcalEndcapN_length" value="55 * cm"' in definitions

    # originals are backed up
    backup = work.source_dir / (BACKWARD_HCAL_FILE + ".backup")
    assert backup.read_text() == BACKWARD_HCAL

    # build products and version control are not copied
    assert not (work.source_dir / "build").exists()
    assert not (work.source_dir / ".git").exists()


def test_materialize_does_not_modify_base(materializer, base_epic, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {"TILE_SIZE": "5"})
    materializer.materialize(params, derived)

    assert (base_epic.source_dir / BACKWARD_HCAL_FILE).read_text() == BACKWARD_HCAL


def test_materialize_is_idempotent(materializer, installer, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})
    first = materializer.materialize(params, derived)

    with patch("nhcal_lib.materialize.materializer.shutil.copytree") as mock_copy:
        second = materializer.materialize(params, derived)

    assert first == second
    assert len(installer.built) == 1
    mock_copy.assert_not_called()


def test_materialize_replaces_incomplete_working_copy(
    materializer, installer, resolver, tmp_path
):
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})
    work = materializer.workingCopy(derived)
    work.source_dir.mkdir(parents=True)
    (work.source_dir / "leftover.txt").write_text("")

    materializer.materialize(params, derived)

    assert not (work.source_dir / "leftover.txt").exists()
    assert installer.built == [work]


def test_materialize_missing_base_raises(materializer, installer, base_epic, resolver, tmp_path):
    base_epic.marker_path.unlink()
    params, derived = _resolve(resolver, tmp_path, {"TILE_SIZE": "5"})

    with pytest.raises(ToolchainMissingError):
        materializer.materialize(params, derived)

    assert installer.built == []


def test_materialize_patch_failure_aborts_before_build(
    materializer, installer, base_epic, resolver, tmp_path
):
    (base_epic.source_dir / DEFINITIONS_FILE).write_text("<define/>")
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})

    with pytest.raises(PatchApplicationError, match="HcalEndcapN_length"):
        materializer.materialize(params, derived)

    assert installer.built == []
    assert not materializer.workingCopy(derived).source_dir.exists()


def test_materialize_missing_source_file_raises(
    materializer, installer, base_epic, resolver, tmp_path
):
    (base_epic.source_dir / BACKWARD_HCAL_FILE).unlink()
    params, derived = _resolve(resolver, tmp_path, {"TILE_SIZE": "5"})

    with pytest.raises(PatchApplicationError, match="does not exist"):
        materializer.materialize(params, derived)

    assert installer.built == []


def test_materialize_length_exceeding_limit_never_builds(resolver, installer, tmp_path):
    params = resolver.resolve(
        {
            "N_LAYERS": "15",
            "ABSORBER_THICKNESS": "5",
            "SCINTILLATOR_THICKNESS": "0.5",
            "LAYER_GAP": "0.1",
        }
    )
    with pytest.raises(ConfigurationError):
        resolver.derive(params, tmp_path)

    assert installer.built == []


def test_materialize_records_applied_edits(materializer, resolver, tmp_path):
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})
    work = materializer.materialize(params, derived)

    record = yaml.safe_load((work.source_dir / APPLIED_PATCHES_FILE).read_text())
    assert record == [
        {"file": DEFINITIONS_FILE, "parameter": "HcalEndcapN_length", "value": "52"}
    ]


def test_materialize_rebuilds_when_layer_gap_changes(
    materializer, installer, resolver, tmp_path
):
    params_a, derived_a = _resolve(
        resolver, tmp_path, {"N_LAYERS": "9", "LAYER_GAP": "0.1"}
    )
    params_b, derived_b = _resolve(
        resolver, tmp_path, {"N_LAYERS": "9", "LAYER_GAP": "0.5"}
    )
    assert derived_a.detector_config_id == derived_b.detector_config_id

    first = materializer.materialize(params_a, derived_a)
    second = materializer.materialize(params_b, derived_b)

    assert first.source_dir == second.source_dir
    assert len(installer.built) == 2

    definitions = (second.source_dir / DEFINITIONS_FILE).read_text()
    assert 'name="HcalEndcapN_length" value="62.1 * cm"' in definitions


def test_materialize_rebuilds_without_record_of_edits(
    materializer, installer, resolver, tmp_path
):
    params, derived = _resolve(resolver, tmp_path, {"N_LAYERS": "8"})
    work = materializer.materialize(params, derived)
    (work.source_dir / APPLIED_PATCHES_FILE).unlink()

    materializer.materialize(params, derived)

    assert len(installer.built) == 2
    assert (work.source_dir / APPLIED_PATCHES_FILE).is_file()
