from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text
from typing import List, Optional, Sequence
from ..core.console import ConsoleIO
from ..core.dice import DiceConfiguration
from ..core.game import GameSession
from ..core.game_state import GameConfig, ScoreBoard, Side
from ..core.probability import ProbabilityEngine, ProbabilityTable
from ..simulation import SimulationResult


console = Console()


class RichConsoleIO(ConsoleIO):
    """ConsoleIO backed by a rich console."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def ask(self, message: str) -> str:
        return Prompt.ask(Text(message, style="cyan"), console=self.console)

    def info(self, message: str):
        self.console.print(message, markup=False, highlight=False)

    def success(self, message: str):
        self.console.print(message, style="green", markup=False, highlight=False)

    def warning(self, message: str):
        self.console.print(message, style="yellow", markup=False, highlight=False)

    def error(self, message: str):
        self.console.print(message, style="bold red", markup=False, highlight=False)

    def show_probability_table(self, configs: Sequence[DiceConfiguration], table: ProbabilityTable):
        self.console.print(build_probability_table(configs, table))


def build_probability_table(configs: Sequence[DiceConfiguration], table: ProbabilityTable) -> Table:
    """Rows are the user's dice, columns the computer's."""
    values = ProbabilityEngine.as_array(table)
    rendered = Table(title="Probability of the win for the user", show_lines=True)
    rendered.add_column("User dice v", style="cyan")
    for config in configs:
        rendered.add_column(str(config), justify="right")

    for r, config in enumerate(configs):
        cells = [f"{values[r, c]:.4f}" for c in range(len(configs))]
        # Diagonal: a die against an identical copy
        cells[r] = f"[dim]{cells[r]}[/dim]"
        rendered.add_row(str(config), *cells)
    return rendered


class InteractiveCLI:
    """Interactive command-line interface for fairdice."""

    def __init__(self, configs: List[DiceConfiguration], config: Optional[GameConfig] = None):
        self.configs = configs
        self.config = config or GameConfig()
        self.io = RichConsoleIO()

    def run(self) -> ScoreBoard:
        """Main CLI loop."""
        console.print(Panel.fit(
            "[bold cyan]Welcome to Fair Dice![/bold cyan]\n"
            "Every roll is committed before you move and revealed afterwards",
            border_style="blue"
        ))
        console.print("Your dice configurations:", highlight=False)
        for i, config in enumerate(self.configs):
            console.print(f"  {i} - {config}", markup=False, highlight=False)

        session = GameSession(self.configs, self.io, config=self.config)
        scoreboard = session.run()
        self.show_scoreboard(scoreboard)
        return scoreboard

    def show_scoreboard(self, scoreboard: ScoreBoard):
        """Display the final score."""
        table = Table(title="Score")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Rounds Played", str(scoreboard.rounds_played))
        table.add_row("Your Wins", str(scoreboard.user_wins))
        table.add_row("Computer Wins", str(scoreboard.house_wins))
        table.add_row("Ties", str(scoreboard.ties))
        leader = scoreboard.leader
        table.add_row("Leader", {Side.USER: "You", Side.HOUSE: "Computer"}.get(leader, "Nobody"))
        if scoreboard.unverified_rounds:
            table.add_row("Unverified Rounds", f"[red]{scoreboard.unverified_rounds}[/red]")
        console.print(table)


def show_simulation_results(result: SimulationResult):
    """Display batch simulation results."""
    table = Table(title=f"Simulation Results ({result.num_rounds} rounds)")
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Empirical", justify="right", style="magenta")
    table.add_column("Exact", justify="right", style="green")

    exact_tie = 1 - result.exact_win_probability - result.exact_loss_probability
    table.add_row("User wins", str(result.wins), f"{result.win_rate:.2%}",
                  f"{float(result.exact_win_probability):.2%}")
    table.add_row("Computer wins", str(result.losses), f"{result.loss_rate:.2%}",
                  f"{float(result.exact_loss_probability):.2%}")
    table.add_row("Ties", str(result.ties), f"{result.ties / result.num_rounds:.2%}",
                  f"{float(exact_tie):.2%}")
    console.print(table)
    console.print(f"User dice: {result.user_die}   Computer dice: {result.house_die}",
                  markup=False, highlight=False)
    console.print(f"[dim]Win rate standard error: {result.standard_error:.4f}; "
                  f"draw chi-square: {result.draw_chi_square:.2f}[/dim]")
