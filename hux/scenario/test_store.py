import json

import pytest

from hux.term.model import (
    Alignment,
    Branch,
    BranchKind,
    Level,
    Scenario,
    Screen,
    ScreenKind,
    Teleport,
    TeleportKind,
    Terminal,
)

from .store import (
    ScenarioFormatError,
    dump_scenario,
    export_scenario,
    import_scenario,
    load_scenario,
    parse_scenario,
    save_scenario,
)

GOOD_SCRIPT = """;
#TERMINAL 0
#UNFINISHED
#INFORMATION
Welcome aboard.
#END
#ENDTERMINAL 0"""

BAD_SCRIPT = """#TERMINAL 0
#UNFINISHED
#INFORMATION
Never closed.
"""


def sample_scenario() -> Scenario:
    terminal = Terminal(
        name="Bridge",
        branches=(
            Branch(
                screens=[
                    Screen(kind=ScreenKind.LOGON, resource_id=1600),
                    Screen(kind=ScreenKind.INFORMATION, script="$C2Alert$C0: hull breach"),
                    Screen(kind=ScreenKind.PICT, alignment=Alignment.RIGHT, resource_id=10012, script="Map"),
                ],
                teleport=Teleport(kind=TeleportKind.INTERLEVEL, index=2),
            ),
            Branch(),
            Branch(screens=[Screen(kind=ScreenKind.LOGOFF, resource_id=1601)]),
        ),
    )
    return Scenario(
        name="Eternal",
        levels=[Level(name="bridge", dir_name="01 Bridge", script_name="bridge", terminals=[terminal])],
    )


def test_dump():
    data = dump_scenario(sample_scenario())
    assert data["NAME"] == "Eternal"
    level = data["LEVELS"][0]
    assert level["DIR_NAME"] == "01 Bridge"
    terminal = level["TERMINALS"][0]
    assert terminal["NAME"] == "Bridge"
    assert list(terminal["BRANCHES"]) == ["UNFINISHED", "FAILED"]

    unfinished = terminal["BRANCHES"]["UNFINISHED"]
    assert unfinished["TELEPORT"] == {"TYPE": 1, "INDEX": 2}
    assert unfinished["SCREENS"][2] == {"TYPE": 3, "ALIGNMENT": 2, "RESOURCE_ID": 10012, "SCRIPT": "Map"}
    # only the raw text is stored
    assert "span" not in json.dumps(data)


def test_parse_derives_display_text():
    scenario = parse_scenario(dump_scenario(sample_scenario()))
    assert scenario == sample_scenario()
    info = scenario.levels[0].terminals[0].branch(BranchKind.UNFINISHED).screens[1]
    assert '<span style="color:#ff0000">Alert</span>' in info.display_text


def test_parse_errors():
    with pytest.raises(ScenarioFormatError):
        parse_scenario([])
    with pytest.raises(ScenarioFormatError):
        parse_scenario({"LEVELS": [{"TERMINALS": [{"BRANCHES": {"SOMETIMES": {}}}]}]})
    with pytest.raises(ScenarioFormatError):
        parse_scenario({"LEVELS": [{"TERMINALS": [{"BRANCHES": {"FAILED": {"SCREENS": [{"TYPE": 12}]}}}]}]})
    with pytest.raises(ScenarioFormatError):
        parse_scenario({"LEVELS": [{"TERMINALS": [{"BRANCHES": {"FAILED": {"SCREENS": [{"TYPE": 0}]}}}]}]})
    with pytest.raises(ScenarioFormatError):
        parse_scenario({"LEVELS": ["not a level"]})


@pytest.mark.parametrize("filename", ["eternal.json", "eternal.yml", "eternal.yaml"])
def test_save_load(tmp_path, filename):
    path = tmp_path / filename
    save_scenario(str(path), sample_scenario())
    assert load_scenario(str(path)) == sample_scenario()


def test_name_from_file(tmp_path):
    path = tmp_path / "unnamed.json"
    scenario = sample_scenario()
    scenario.name = ""
    save_scenario(str(path), scenario)
    assert load_scenario(str(path)).name == "unnamed"


def test_load_errors(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(ScenarioFormatError):
        load_scenario(str(path))
    with pytest.raises(OSError):
        load_scenario(str(tmp_path / "missing.json"))


def make_split_folder(tmp_path):
    folder = tmp_path / "Eternal"
    (folder / "Resources").mkdir(parents=True)
    for name, script in [("01 Arrival", GOOD_SCRIPT), ("02 Broken", BAD_SCRIPT)]:
        (folder / name).mkdir()
        (folder / name / f"{name.split()[1].lower()}.term.txt").write_text(script, encoding="utf-8")
    (folder / "03 Empty").mkdir()
    (folder / "03 Empty" / "notes.txt").write_text("nothing here", encoding="utf-8")
    return folder


def test_import_isolates_failures(tmp_path):
    folder = make_split_folder(tmp_path)
    scenario, failures = import_scenario(str(folder))

    assert scenario.name == "Eternal"
    assert [lv.dir_name for lv in scenario.levels] == ["01 Arrival"]
    assert scenario.levels[0].script_name == "arrival"
    assert len(scenario.levels[0].terminals) == 1

    assert len(failures) == 1
    assert failures[0].path.endswith("broken.term.txt")
    assert failures[0].bad_format


def test_import_isolates_undecodable_scripts(tmp_path):
    folder = tmp_path / "Eternal"
    (folder / "Resources").mkdir(parents=True)
    (folder / "01").mkdir()
    (folder / "01" / "a.term.txt").write_bytes(b"#TERMINAL 0\n\xff\xfe bad\n#ENDTERMINAL 0")
    (folder / "02").mkdir()
    (folder / "02" / "a.term.txt").write_text(GOOD_SCRIPT, encoding="utf-8")

    scenario, failures = import_scenario(str(folder))
    assert [lv.dir_name for lv in scenario.levels] == ["02"]
    assert len(failures) == 1
    assert failures[0].path.endswith("a.term.txt")
    assert failures[0].bad_format


def test_import_needs_resources(tmp_path):
    (tmp_path / "01 Arrival").mkdir()
    with pytest.raises(ScenarioFormatError):
        import_scenario(str(tmp_path))


def test_export_import(tmp_path):
    folder = tmp_path / "out"
    export_scenario(str(folder), sample_scenario())
    assert (folder / "01 Bridge" / "bridge.term.txt").is_file()

    (folder / "Resources").mkdir()
    scenario, failures = import_scenario(str(folder))
    assert failures == []
    # terminal names aren't part of the script format
    expected = sample_scenario().levels[0].terminals
    expected[0].name = ""
    assert scenario.levels[0].terminals == expected
