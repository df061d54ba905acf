# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from nhcal_lib.core.common import format_number, get_panel_width
from nhcal_lib.core.config import CFG
from nhcal_lib.parameters import Parameters
from nhcal_lib.parameters.derived import DerivedConfig


class ConfigPresenter:
    """
    Presentation layer for the configuration of a batch.
    """

    def __init__(self, params: Parameters, derived: DerivedConfig, defaults: Parameters):
        """
        Initialize the presenter.

        Args:
            params (Parameters): The resolved parameters.
            derived (DerivedConfig): The derived configuration of `params`.
            defaults (Parameters): The default parameters. Geometry parameters
                differing from them are highlighted.
        """
        self._params = params
        self._derived = derived
        self._changed = set(params.changedGeometry(defaults))

    def createConfigPanel(self, console: Console | None = None) -> Group:
        """
        Create a panel describing the detector, the particle gun, and the outputs.

        Args:
            console (Console | None): Optional Rich console.
                If not provided, a new Console is created.

        Returns:
            Group: A Rich Group containing the configuration panel.
        """
        console = console or Console()

        content = Group(
            self._createRule("DETECTOR"),
            Text(""),
            Padding(self._createDetectorTable(), (0, 2)),
            Text(""),
            self._createRule("SIMULATION"),
            Text(""),
            Padding(self._createSimulationTable(), (0, 2)),
            Text(""),
            self._createRule("OUTPUT"),
            Text(""),
            Padding(self._createOutputTable(), (0, 2)),
        )

        panel = Panel(
            content,
            title=Text(
                "NHCAL CONFIGURATION",
                style=CFG.presenter.title_style,
                justify="center",
            ),
            border_style=CFG.presenter.border_style,
            # no horizontal padding so Rule reaches borders
            padding=(1, 0),
            width=get_panel_width(
                console, 2, CFG.presenter.min_width, CFG.presenter.max_width
            ),
        )

        return Group(Text(""), panel, Text(""))

    def _createRule(self, title: str) -> Rule:
        return Rule(
            title=Text(title, style=CFG.presenter.section_style),
            style=CFG.presenter.border_style,
        )

    @staticmethod
    def _createTable() -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(justify="right", style=CFG.presenter.key_style)
        table.add_column(justify="left", overflow="fold", style=CFG.presenter.value_style)
        return table

    def _createDetectorTable(self) -> Table:
        table = self._createTable()
        p = self._params

        table.add_row("Tile size:", self._geometry("tile_size", f"{format_number(p.tile_size)} cm"))
        table.add_row(
            "Absorber thickness:",
            self._geometry("absorber_thickness", f"{format_number(p.absorber_thickness)} cm"),
        )
        table.add_row(
            "Scintillator thickness:",
            self._geometry(
                "scintillator_thickness", f"{format_number(p.scintillator_thickness)} cm"
            ),
        )
        table.add_row("Layer gap:", Text(f"{format_number(p.layer_gap)} cm"))
        table.add_row("Number of layers:", self._geometry("n_layers", str(p.n_layers)))
        table.add_row(
            "Total length:", Text(f"{format_number(self._derived.total_length)} cm")
        )
        table.add_row(
            "Geometry:",
            Text("custom", style="bright_yellow")
            if self._changed
            else Text("default", style="bright_green"),
        )

        return table

    def _createSimulationTable(self) -> Table:
        table = self._createTable()
        p = self._params

        table.add_row("Particle:", Text(p.particle))
        table.add_row("Momentum:", Text(f"{format_number(p.momentum)} GeV"))
        table.add_row("Phi:", Text(f"{format_number(p.phi)} deg"))
        table.add_row("Theta:", Text(f"{format_number(p.theta)} deg"))
        table.add_row("Events per job:", Text(str(p.events_per_job)))
        table.add_row("Number of jobs:", Text(str(p.job_count)))

        return table

    def _createOutputTable(self) -> Table:
        table = self._createTable()

        table.add_row("Detector config:", Text(self._derived.detector_config_id))
        table.add_row("Simulation config:", Text(self._derived.simulation_config_id))
        table.add_row("Output directory:", Text(str(self._derived.output_dir)))

        return table

    def _geometry(self, name: str, value: str) -> Text:
        """Format a geometry value, highlighting it if it differs from the default."""
        if name in self._changed:
            return Text(value, style="bright_yellow bold")
        return Text(value)
