from __future__ import annotations

import json

from typer.testing import CliRunner

from repo_analytics.cli import app, render_summary, snapshot_to_dict


def test_render_summary_flags_synthetic_activity(snapshot_factory):
    text = render_summary(snapshot_factory(synthetic=True))

    assert text.startswith("acme/demo - No description available")
    assert "Activity (synthetic):" in text
    assert "Lines of code ~20" in text


def test_snapshot_to_dict_is_json_serializable(snapshot_factory):
    payload = snapshot_to_dict(snapshot_factory(stars=3))

    decoded = json.loads(json.dumps(payload))
    assert decoded["stats"]["stars"] == 3
    assert decoded["commit_activity"]["synthetic"] is False
    assert isinstance(decoded["last_fetched"], str)


def test_analyze_command_rejects_malformed_identifier():
    result = CliRunner().invoke(app, ["analyze", "react"])

    assert result.exit_code == 1
    assert "owner/repo" in result.output
