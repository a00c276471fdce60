from click.testing import CliRunner

from main import cli

SCRIPT = """;
#TERMINAL 0
#UNFINISHED
#INFORMATION
$BHello$b there.
#END
#ENDTERMINAL 0"""


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "Hux v" in result.output


def test_term_check(tmp_path):
    (tmp_path / "good.term.txt").write_text(SCRIPT, encoding="utf-8")
    result = CliRunner().invoke(cli, ["term", "check", str(tmp_path / "good.term.txt")])
    assert result.exit_code == 0

    (tmp_path / "bad.term.txt").write_text("#TERMINAL 0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["term", "check", "-q", str(tmp_path)])
    assert result.exit_code == 1

    (tmp_path / "bad.term.txt").write_bytes(b"\xff#TERMINAL 0\n#ENDTERMINAL 0")
    result = CliRunner().invoke(cli, ["term", "check", "-q", str(tmp_path)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_term_preview(tmp_path):
    (tmp_path / "level.term.txt").write_text(SCRIPT, encoding="utf-8")
    result = CliRunner().invoke(cli, ["term", "preview", "-q", str(tmp_path), str(tmp_path / "html")])
    assert result.exit_code == 0
    html = (tmp_path / "html" / "level.html").read_text(encoding="utf-8")
    assert "<b>Hello</b> there." in html


def test_scenario_commands(tmp_path):
    folder = tmp_path / "Eternal"
    (folder / "Resources").mkdir(parents=True)
    (folder / "01 Arrival").mkdir()
    (folder / "01 Arrival" / "arrival.term.txt").write_text(SCRIPT, encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["scenario", "import", str(folder), str(tmp_path / "eternal.json")])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["scenario", "convert", str(tmp_path / "eternal.json"), str(tmp_path / "eternal.yml")])
    assert result.exit_code == 0
    assert "SCRIPT_NAME: arrival" in (tmp_path / "eternal.yml").read_text(encoding="utf-8")

    result = runner.invoke(cli, ["scenario", "export", str(tmp_path / "eternal.yml"), str(tmp_path / "split")])
    assert result.exit_code == 0
    exported = (tmp_path / "split" / "01 Arrival" / "arrival.term.txt").read_text(encoding="utf-8")
    assert exported == SCRIPT
