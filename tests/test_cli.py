from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from dlabbib import cli
from dlabbib.flags import parse_flags
from helpers import FakeRemote, hal_article

runner = CliRunner()


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ZOTERO_API_KEY", "secret")
    monkeypatch.setenv("ZOTERO_LIBRARY_TYPE", "groups")
    monkeypatch.setenv("ZOTERO_LIBRARY_ID", "4242")
    monkeypatch.setenv("DLABBIB_HAL_URL", "https://hal.test/search/")
    monkeypatch.setenv("DLABBIB_ZOTERO_URL", "https://zotero.test")
    monkeypatch.setenv("DLABBIB_LOG_LEVEL", "WARNING")
    remote = FakeRemote()
    monkeypatch.setattr(cli, "_client", lambda settings: httpx.AsyncClient(transport=remote.transport()))
    return remote


def test_config_json_masks_api_key(env, monkeypatch):
    monkeypatch.setenv("DLABBIB_LOG_LEVEL", "DEBUG")

    result = runner.invoke(cli.app, ["config", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["zotero_api_key"] == "***"
    assert payload["zotero_library_id"] == "4242"
    assert payload["log_level"] == "DEBUG"


def test_import_hal_reports_counts_as_json(env):
    env.hal_docs["hal-0001"] = hal_article()

    result = runner.invoke(cli.app, ["import-hal", "hal-0001", "hal-0001", "hal-0404", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["requested"] == 2
    assert payload["imported"] == 1
    assert payload["skipped"] == 1
    assert len(env.create_calls) == 1


def test_import_hal_reads_identifier_file(env, tmp_path):
    env.hal_docs["hal-0001"] = hal_article()
    id_file = tmp_path / "ids.txt"
    id_file.write_text("hal-0001\n\nhal-0001\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["import-hal", "--file", str(id_file), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["requested"] == 1


def test_import_hal_without_identifiers_fails(env):
    result = runner.invoke(cli.app, ["import-hal"])
    assert result.exit_code == 1
    assert "No usable identifiers" in result.stdout


def test_missing_zotero_configuration_is_fatal(env, monkeypatch):
    monkeypatch.delenv("ZOTERO_API_KEY")
    env.hal_docs["hal-0001"] = hal_article()

    result = runner.invoke(cli.app, ["import-hal", "hal-0001"])

    assert result.exit_code == 1
    assert "Missing Zotero configuration" in result.stdout
    assert env.create_calls == []


def test_set_flags_updates_extra(env):
    env.add_item("ABCD1234", version=4, extra="note")

    result = runner.invoke(cli.app, ["set-flags", "ABCD1234", "--flag", "hal_done=oui"])

    assert result.exit_code == 0
    assert parse_flags(env.items["ABCD1234"]["extra"]) == {"hal_done": "yes"}


def test_set_flags_reports_conflict(env):
    env.add_item("ABCD1234", version=4)
    env.put_status = 412

    result = runner.invoke(cli.app, ["set-flags", "ABCD1234", "--flag", "hal_done=yes"])

    assert result.exit_code == 1
    assert "conflict" in result.stdout
    assert env.put_calls == 1


def test_add_rejects_incomplete_record(env):
    result = runner.invoke(
        cli.app,
        ["add", "--type", "book", "--title", "Handbook", "--author", "Curie, Marie", "--date", "2020"],
    )
    assert result.exit_code == 1
    assert "publisher" in result.stdout
    assert env.create_calls == []


def test_add_creates_item(env):
    result = runner.invoke(
        cli.app,
        [
            "add",
            "--type",
            "journalArticle",
            "--title",
            "Short note",
            "--author",
            "Marie Curie",
            "--date",
            "2020",
            "--journal",
            "JLS",
            "--doi",
            "doi:10.1/abc",
        ],
    )
    assert result.exit_code == 0
    created = env.create_calls[0][0]
    assert created["DOI"] == "10.1/abc"
    assert created["creators"][0]["lastName"] == "Curie"
