import json

import pytest

from bike_parking import cli
from bike_parking.config.settings import DEFAULT_BLOB_PATH, AppSettings, StorageSettings


@pytest.fixture
def local_settings(monkeypatch, tmp_path):
    settings = AppSettings(storage=StorageSettings(backend="local", data_dir=str(tmp_path)))
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    return tmp_path


def test_cli_prints_filtered_markers(local_settings, sample_payload, capsys):
    (local_settings / DEFAULT_BLOB_PATH).write_bytes(sample_payload)

    exit_code = cli.main(["--placement", "parklet"])

    assert exit_code == 0
    markers = json.loads(capsys.readouterr().out)
    assert [marker["id"] for marker in markers] == ["104"]
    assert markers[0]["icon"] == "icon_parklet"


def test_cli_summary(local_settings, sample_payload, capsys):
    (local_settings / DEFAULT_BLOB_PATH).write_bytes(sample_payload)

    exit_code = cli.main(["--format", "summary", "--limit", "2"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "2 spots"
    assert "  Sidewalk: 1" in out
    assert "  Garage: 1" in out


def test_cli_missing_file_fails(local_settings, capsys):
    assert cli.main([]) == 1
    assert capsys.readouterr().out == ""


def test_cli_bad_settings(monkeypatch):
    def broken_settings():
        raise RuntimeError("Supabase credentials are not configured.")

    monkeypatch.setattr(cli, "get_settings", broken_settings)

    assert cli.main([]) == 1


@pytest.mark.parametrize("limit", ["-1", "0", "many"])
def test_cli_rejects_non_positive_limit(local_settings, sample_payload, limit, capsys):
    (local_settings / DEFAULT_BLOB_PATH).write_bytes(sample_payload)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--limit", limit])

    assert excinfo.value.code == 2
    assert capsys.readouterr().out == ""


def test_cli_limit_keeps_first_spots(local_settings, sample_payload, capsys):
    (local_settings / DEFAULT_BLOB_PATH).write_bytes(sample_payload)

    assert cli.main(["--limit", "2"]) == 0

    markers = json.loads(capsys.readouterr().out)
    assert [marker["id"] for marker in markers] == ["101", "102"]


def test_summary_groups_placements_like_the_filter(spot_factory):
    spots = [
        spot_factory(id="1", placement="GARAGE"),
        spot_factory(id="2", placement=" garage"),
        spot_factory(id="3", placement="Sidewalk"),
    ]

    summary = cli.summarize(spots)

    assert summary.splitlines() == ["3 spots", "  Garage: 2", "  Sidewalk: 1"]
