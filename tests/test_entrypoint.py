import importlib


def test_console_module_entrypoint_delegates_to_cli_main(monkeypatch):
    cli_entry = importlib.import_module("typh_cli.__main__")
    monkeypatch.setattr(cli_entry, "main", lambda: 7)

    assert cli_entry.run() == 7


def test_console_script_target_delegates_to_main(monkeypatch):
    cli_main = importlib.import_module("typh_cli.main")
    monkeypatch.setattr(cli_main, "main", lambda: 5)

    assert cli_main.run() == 5
