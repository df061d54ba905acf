# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass
from pathlib import Path
from typing import Self

from nhcal_lib.core.common import format_number
from nhcal_lib.core.logger import get_logger
from nhcal_lib.parameters import DerivedConfig, Parameters

from .template import Template

logger = get_logger(__name__)

# Scheduler macros expanded at dispatch time.
BATCH_ID_MACRO = "$(Cluster)"
INSTANCE_ID_MACRO = "$(Process)"

SUBMIT_DESCRIPTION = Template(
    "submission descriptor",
    """Universe                = vanilla
GetEnv                  = False
Requirements            = (CPU_Speed >= 1)
Rank                    = CPU_Speed
Initialdir              = @INITIAL_DIR@
Arguments               = @ARGUMENTS@
Executable              = @EXECUTABLE@
Error                   = @ERROR_LOG@
Output                  = @OUTPUT_LOG@
Log                     = @USER_LOG@
# File transfer settings
Should_Transfer_Files   = YES
When_To_Transfer_Output = ON_EXIT
Transfer_Input_Files    = @EXECUTABLE@
Transfer_Output_Files   = ""

Queue @QUEUE_COUNT@
""",
)


@dataclass(frozen=True)
class JobDescriptor:
    """
    Description of a batch of identical jobs.

    Every queued instance receives the same broadcast arguments, prefixed by
    the batch and instance identifiers assigned by the scheduler.
    """

    # Job script executed by every instance.
    executable: Path

    # Broadcast arguments: momentum, phi, theta, particle, number of events.
    arguments: tuple[str, str, str, str, str]

    # Directory with per-instance logs.
    log_dir: Path

    # Number of instances to queue.
    queue_count: int

    # Directory the instances are started from.
    initial_dir: Path

    @classmethod
    def fromParameters(
        cls,
        params: Parameters,
        derived: DerivedConfig,
        executable: Path,
        initial_dir: Path,
    ) -> Self:
        return cls(
            executable=executable,
            arguments=(
                format_number(params.momentum),
                format_number(params.phi),
                format_number(params.theta),
                params.particle,
                str(params.events_per_job),
            ),
            log_dir=derived.log_dir,
            queue_count=params.job_count,
            initial_dir=initial_dir,
        )

    def logPath(self, kind: str, suffix: str) -> str:
        """Get the per-instance log path template, e.g. 'log/error$(Cluster)_$(Process).err'."""
        return str(self.log_dir / f"{kind}{BATCH_ID_MACRO}_{INSTANCE_ID_MACRO}.{suffix}")

    def render(self) -> str:
        """
        Render the HTCondor submit description.

        Raises:
            TemplateError: If the description cannot be fully rendered.
        """
        return SUBMIT_DESCRIPTION.render(
            {
                "INITIAL_DIR": self.initial_dir,
                "ARGUMENTS": " ".join(
                    (BATCH_ID_MACRO, INSTANCE_ID_MACRO, *self.arguments)
                ),
                "EXECUTABLE": self.executable,
                "ERROR_LOG": self.logPath("error", "err"),
                "OUTPUT_LOG": self.logPath("out", "out"),
                "USER_LOG": self.logPath("log", "log"),
                "QUEUE_COUNT": self.queue_count,
            }
        )

    def write(self, target: Path) -> Path:
        """
        Write the submit description into a file, replacing an existing one.

        Returns:
            Path: Path to the written file.
        """
        content = self.render()
        target.write_text(content)
        logger.info(f"Job submission file created: '{target}'.")
        return target
