import logging
import click
from rich.console import Console
from rich.logging import RichHandler
from ..core.dice import parse_configurations
from ..core.errors import EntropyFailure, StartupConfigError
from ..core.game_state import GameConfig
from ..simulation import MatchupSimulator
from .interface import InteractiveCLI, show_simulation_results


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(level: str):
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.command()
@click.argument('dice', nargs=-1)
@click.option('--reselect-each-round', is_flag=True, envvar='FAIRDICE_RESELECT',
              help='Repeat the first-move guess and dice selection every round')
@click.option('--simulate', '-s', type=click.IntRange(min=1), default=None,
              help='Simulate N fair rounds between the first two dice instead of playing')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default='WARNING', envvar='FAIRDICE_LOG_LEVEL', show_default=True,
              help='Log level for diagnostics on stderr')
def main(dice, reselect_each_round, simulate, log_level):
    """Fair Dice - a provably fair dice game.

    DICE are comma-separated face values, e.g. 2,2,4,4,9,9 1,1,6,6,8,8
    """
    configure_logging(log_level)
    try:
        configs = parse_configurations(dice)
    except StartupConfigError as exc:
        raise click.UsageError(str(exc))

    try:
        if simulate:
            user_die = configs[0]
            house_die = configs[1] if len(configs) > 1 else configs[0]
            click.echo(f"Running {simulate} rounds of simulation...")
            show_simulation_results(MatchupSimulator().simulate(user_die, house_die, simulate))
        else:
            cli = InteractiveCLI(configs, GameConfig(reselect_each_round=reselect_each_round))
            cli.run()
    except EntropyFailure as exc:
        raise click.ClickException(str(exc))
    except (KeyboardInterrupt, EOFError):
        click.echo("\nGame interrupted. Goodbye!")


if __name__ == "__main__":
    main()
