import json

from supercli.session.preferences_store import Preferences, PreferencesStore


def test_defaults_when_nothing_saved(tmp_path) -> None:
    prefs = PreferencesStore(home_dir=tmp_path / "home").load(tmp_path / "project")
    assert prefs == Preferences()


def test_project_overrides_home_shallowly(tmp_path) -> None:
    store = PreferencesStore(home_dir=tmp_path / "home")
    store.save(Preferences(theme="light", font_size=15, per_language_defaults={"python": "claude"}))
    project = tmp_path / "project"
    project_file = store.project_path_for(project)
    project_file.parent.mkdir(parents=True)
    project_file.write_text(json.dumps({"font_size": 18, "per_language_defaults": {"go": "codex"}}))

    prefs = store.load(project)

    assert prefs.theme == "light"
    assert prefs.font_size == 18
    assert prefs.per_language_defaults == {"go": "codex"}


def test_unknown_keys_and_bad_files_are_ignored(tmp_path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    (home / "preferences.json").write_text(json.dumps({"theme": "light", "legacy": True}))
    project = tmp_path / "project"
    (project / ".supercli").mkdir(parents=True)
    (project / ".supercli" / "preferences.json").write_text("[broken")

    prefs = PreferencesStore(home_dir=home).load(project)

    assert prefs.theme == "light"


def test_save_to_project_writes_project_file(tmp_path) -> None:
    store = PreferencesStore(home_dir=tmp_path / "home")
    target = store.save(Preferences(backup_config={"interval_minutes": 30}), project_path=tmp_path)

    assert target == tmp_path / ".supercli" / "preferences.json"
    assert json.loads(target.read_text())["backup_config"] == {"interval_minutes": 30}
