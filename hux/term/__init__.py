import os
import sys

import click

import hux.term.config as config
import hux.term.preview as preview
import hux.term.script as script
from utils import cli_file_pairs, find_files, foreach_file_pair


@click.group(help="Aleph One terminal scripts (.term.txt).", options_metavar="")
def cli():
    pass


@cli.command(name="check", no_args_is_help=True)
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option(
    "--recursive",
    "-r",
    is_flag=True,
    help="Recurse into subdirectories of the input directory to find more applicable files.",
)
@click.option("--quiet", "-q", is_flag=True, help="Only report files that fail to parse.")
def term_check(input=None, recursive=False, quiet=False):
    """
    Parses the terminal script(s) at INPUT and reports the ones that are not valid.

    INPUT can be a single file or a directory, in which case every file ending in `.term.txt` is checked.
    Exits with an error code if any file fails.
    """
    if input is not None and os.path.isfile(input):
        paths = [input]
    else:
        paths = find_files(input or ".", [script.SCRIPT_SUFFIX], recursive)

    failed = 0
    for path in paths:
        try:
            level = script.load_level_script(path)
        except (OSError, script.ScriptParseError) as e:
            failed += 1
            print(f"ERR: {path}: {e}", file=sys.stderr)
            continue
        if not quiet:
            screens = sum(len(b.screens) for t in level.terminals for b in t.branches)
            print(f"{path}: {len(level.terminals)} terminals, {screens} screens")

    if failed:
        sys.exit(1)


@cli.command(name="preview", no_args_is_help=True)
@click.argument("input", required=False, type=click.Path(exists=True))
@click.argument("output", required=False, type=click.Path(exists=False))
@click.option(
    "--recursive",
    "-r",
    is_flag=True,
    help="Recurse into subdirectories of the input directory to find more applicable files.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress all output. By default, operations involving multiple files will show a progressbar.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    help="A YAML file with wrapping and color settings, or the name of a shipped preset (default, legacy).",
)
def term_preview(input=None, output=None, recursive=False, quiet=False, config_path=None):
    """
    Renders the terminal script(s) at INPUT into HTML pages at OUTPUT, wrapped like the game would.

    INPUT can be a single file or a directory (in which case every `.term.txt` file is processed).
    If OUTPUT is unset, each page is written next to its script, with `.term.txt` exchanged for `.html`.
    """
    cfg = config.load_config(config_path)
    codec = cfg.codec()

    def process(inpath, outpath):
        try:
            level = script.load_level_script(inpath, codec)
        except (OSError, script.ScriptParseError) as e:
            print(f"ERR: {inpath}: could not read script: {e}", file=sys.stderr)
            return
        html = preview.preview_level(level, codec, cfg.screen_max_lines)
        if os.path.dirname(outpath):
            os.makedirs(os.path.dirname(outpath), exist_ok=True)
        with open(outpath, "w", encoding="utf-8") as outf:
            outf.write(html)

    pairs = cli_file_pairs(
        input, output, in_endings=[script.SCRIPT_SUFFIX], out_ending=".html", recursive=recursive
    )
    foreach_file_pair(pairs, process, quiet=quiet)
