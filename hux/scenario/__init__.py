import sys

import click

import hux.scenario.store as store
import hux.term.config as config


@click.group(help="Whole scenarios: Hux scenario files (.json/.yml) and split map folders.", options_metavar="")
def cli():
    pass


@cli.command(name="import", no_args_is_help=True)
@click.argument("folder", type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.argument("output", type=click.Path(exists=False, dir_okay=False))
@click.option(
    "--config",
    "-c",
    "config_path",
    help="A YAML file with wrapping and color settings, or the name of a shipped preset (default, legacy).",
)
def scenario_import(folder=None, output=None, config_path=None):
    """
    Reads the terminal scripts of every level in the split map FOLDER into the scenario file OUTPUT.

    FOLDER must contain a `Resources` directory; every other subdirectory is treated as a level.
    Levels whose script can't be read are reported and skipped.
    OUTPUT is written as YAML if it ends in `.yml` or `.yaml`, and as JSON otherwise.
    """
    codec = config.load_config(config_path).codec()
    try:
        scenario, failures = store.import_scenario(folder, codec)
    except store.ScenarioFormatError as e:
        print(f"ERR: {e}", file=sys.stderr)
        sys.exit(1)

    for failure in failures:
        reason = "invalid script" if failure.bad_format else "could not read file"
        print(f"ERR: {failure.path}: {reason}: {failure.error}", file=sys.stderr)

    store.save_scenario(output, scenario)
    print(f"Imported {len(scenario.levels)} levels ({len(failures)} failed).")


@cli.command(name="export", no_args_is_help=True)
@click.argument("input", type=click.Path(exists=True, dir_okay=False))
@click.argument("folder", type=click.Path(exists=False, file_okay=False, dir_okay=True))
def scenario_export(input=None, folder=None):
    """
    Writes the terminal script of every level in the scenario file INPUT into the split map FOLDER,
    as `FOLDER/<level directory>/<script name>.term.txt`.
    """
    try:
        scenario = store.load_scenario(input)
    except store.ScenarioFormatError as e:
        print(f"ERR: {input}: {e}", file=sys.stderr)
        sys.exit(1)

    store.export_scenario(folder, scenario)


@cli.command(name="convert", no_args_is_help=True)
@click.argument("input", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(exists=False, dir_okay=False))
def scenario_convert(input=None, output=None):
    """
    Converts the scenario file INPUT into OUTPUT, picking JSON or YAML by each file's ending.
    """
    try:
        scenario = store.load_scenario(input)
    except store.ScenarioFormatError as e:
        print(f"ERR: {input}: {e}", file=sys.stderr)
        sys.exit(1)

    store.save_scenario(output, scenario)
