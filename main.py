import click

import hux
import version

CONTEXT_SETTINGS = dict(help_option_names = ['--help', '-h', '-?'])

@click.group(name="hux", context_settings=CONTEXT_SETTINGS)
@click.version_option(version.__version__, '--version', '-v', prog_name="hux", message=f"Hux v{version.__version__}")
def cli():
    pass

cli.add_command(hux.term.cli, "term")
cli.add_command(hux.scenario.cli, "scenario")

if __name__ == "__main__":
    cli()
