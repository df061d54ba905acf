# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from nhcal_lib.batch import BatchHandle
from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import BuildError
from nhcal_lib.monitor import MonitorOutcome
from nhcal_lib.submit.cli import submit


@pytest.fixture(autouse=True)
def base_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(CFG.env_vars.base_dir, str(tmp_path))
    return tmp_path


def _invoke(args, campaign=None, batch_system=None):
    campaign = campaign or MagicMock()
    batch_system = batch_system or MagicMock()
    with (
        patch("nhcal_lib.submit.cli.Campaign.fromConfig", return_value=campaign) as mock_ctor,
        patch("nhcal_lib.submit.cli.BatchMeta.obtain", return_value=batch_system) as mock_obtain,
        patch("nhcal_lib.submit.cli.logger") as mock_logger,
    ):
        result = CliRunner().invoke(submit, args)
    return result, mock_ctor, mock_obtain, mock_logger


def test_submit_runs_campaign():
    campaign = MagicMock()
    campaign.run.return_value = BatchHandle(batch_id="1234", job_count=10)

    result, mock_ctor, mock_obtain, _ = _invoke(
        ["--tile-size", "5", "--batch-system", "HTCondor"], campaign
    )

    assert result.exit_code == 0
    mock_obtain.assert_called_once_with("HTCondor")
    campaign.run.assert_called_once_with(submit=True)

    params, derived, defaults, base, batch_system = mock_ctor.call_args.args
    assert str(params.tile_size) == "5"
    assert derived.detector_config_id.startswith("nhcal_only_tile5cm")
    assert batch_system is mock_obtain.return_value


def test_submit_no_submit_skips_batch_system():
    campaign = MagicMock()
    campaign.run.return_value = None

    result, mock_ctor, mock_obtain, _ = _invoke(["--no-submit"], campaign)

    assert result.exit_code == 0
    mock_obtain.assert_not_called()
    campaign.run.assert_called_once_with(submit=False)
    assert mock_ctor.call_args.args[4] is None


def test_submit_invalid_parameters_has_no_side_effects(base_dir):
    result, mock_ctor, _, mock_logger = _invoke(
        [
            "--n-layers",
            "15",
            "--absorber-thickness",
            "5",
            "--scintillator-thickness",
            "0.5",
            "--layer-gap",
            "0.1",
        ]
    )

    assert result.exit_code == CFG.exit_codes.default
    mock_ctor.assert_not_called()
    assert "exceeds maximum length" in str(mock_logger.error.call_args.args[0])
    assert list(base_dir.iterdir()) == []


def test_submit_unparsable_parameter_from_environment(monkeypatch):
    monkeypatch.setenv("NUMBER_OF_EVENTS", "many")

    result, mock_ctor, _, mock_logger = _invoke([])

    assert result.exit_code == CFG.exit_codes.default
    mock_ctor.assert_not_called()
    assert "'many'" in str(mock_logger.error.call_args.args[0])


def test_submit_build_failure():
    campaign = MagicMock()
    campaign.run.side_effect = BuildError("Failed to build EPIC: error.")

    result, _, _, mock_logger = _invoke([], campaign)

    assert result.exit_code == CFG.exit_codes.default
    mock_logger.error.assert_called_once_with(campaign.run.side_effect)


def test_submit_unexpected_error():
    campaign = MagicMock()
    campaign.run.side_effect = RuntimeError("boom")

    result, _, _, mock_logger = _invoke([], campaign)

    assert result.exit_code == CFG.exit_codes.unexpected_error
    mock_logger.critical.assert_called_once()


@pytest.mark.parametrize(
    "outcome, exit_code",
    [(MonitorOutcome.DONE, 0), (MonitorOutcome.TIMED_OUT, 1), (MonitorOutcome.HELD, 1)],
)
def test_submit_with_monitor(outcome, exit_code):
    campaign = MagicMock()
    campaign.run.return_value = BatchHandle(batch_id="1234", job_count=10)

    with patch("nhcal_lib.submit.cli.monitor_jobs", return_value=outcome) as mock_monitor:
        result, _, mock_obtain, _ = _invoke(["--monitor"], campaign)

    assert result.exit_code == exit_code
    args = mock_monitor.call_args.args
    assert args[0] is mock_obtain.return_value
    assert args[2] == CFG.monitor.running_time_limit_hours
    assert args[4].name == "log"


def test_submit_monitor_ignored_without_submission():
    campaign = MagicMock()
    campaign.run.return_value = None

    with patch("nhcal_lib.submit.cli.monitor_jobs") as mock_monitor:
        result, _, _, _ = _invoke(["--no-submit", "--monitor"], campaign)

    assert result.exit_code == 0
    mock_monitor.assert_not_called()
