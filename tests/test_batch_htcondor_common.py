# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from nhcal_lib.batch.htcondor.common import parse_condor_q_totals, parse_condor_submit
from nhcal_lib.batch.interface import BatchHandle, JobQueueSnapshot
from nhcal_lib.core.error import SchedulerError, SubmissionError

CONDOR_Q_OUTPUT = """

-- Schedd: sphnxsub01.sdcc.bnl.gov : <130.199.1.1:9618?... @ 01/01/25 12:00:00
OWNER BATCH_NAME    SUBMITTED   DONE   RUN    IDLE  TOTAL JOB_IDS
alice ID: 1234     1/1  11:50      3      5      2     10 1234.3-9

Total for query: 7 jobs; 0 completed, 0 removed, 2 idle, 5 running, 0 held, 0 suspended
Total for alice: 7 jobs; 0 completed, 0 removed, 2 idle, 5 running, 0 held, 0 suspended
Total for all users: 120 jobs; 0 completed, 1 removed, 40 idle, 75 running, 4 held, 0 suspended

"""


def test_parse_condor_submit():
    output = "Submitting job(s)..........\n10 job(s) submitted to cluster 1234.\n"
    assert parse_condor_submit(output) == BatchHandle(batch_id="1234", job_count=10)


def test_parse_condor_submit_single_job():
    handle = parse_condor_submit("1 job(s) submitted to cluster 99.")
    assert handle.job_count == 1
    assert str(handle) == "99"


def test_parse_condor_submit_invalid():
    with pytest.raises(SubmissionError, match="Could not find the submitted cluster"):
        parse_condor_submit("ERROR: on Line 3 of submit file")


def test_parse_condor_q_totals_user_line():
    snapshot = parse_condor_q_totals(CONDOR_Q_OUTPUT, "alice")

    assert snapshot == JobQueueSnapshot(
        total_remaining=7, completed=0, removed=0, idle=2, running=5, held=0, suspended=0
    )


def test_parse_condor_q_totals_ignores_other_summaries():
    snapshot = parse_condor_q_totals(CONDOR_Q_OUTPUT, "alice")
    assert snapshot.held == 0


def test_parse_condor_q_totals_no_jobs():
    output = "Total for bob: 0 jobs; 0 completed, 0 removed, 0 idle, 0 running, 0 held, 0 suspended\n"
    assert parse_condor_q_totals(output, "bob") == JobQueueSnapshot(total_remaining=0)


def test_parse_condor_q_totals_held_only():
    output = "Total for bob: 3 jobs; 0 completed, 0 removed, 0 idle, 0 running, 3 held, 0 suspended"
    snapshot = parse_condor_q_totals(output, "bob")

    assert snapshot.total_remaining == 3
    assert snapshot.held == 3


def test_parse_condor_q_totals_missing_user_line():
    with pytest.raises(SchedulerError, match="user 'carol'"):
        parse_condor_q_totals(CONDOR_Q_OUTPUT, "carol")


def test_parse_condor_q_totals_user_name_is_escaped():
    output = "Total for a.b: 1 jobs; 0 completed, 0 removed, 1 idle, 0 running, 0 held, 0 suspended"

    with pytest.raises(SchedulerError):
        parse_condor_q_totals(output, "a+b")
