"""Tests for the command line entry point."""

import os
from unittest.mock import patch

from click.testing import CliRunner

from aichat_workspace.cli import main


def test_serve_runs_uvicorn():
    runner = CliRunner()
    with patch("aichat_workspace.cli.uvicorn.run") as run, patch.dict(os.environ, {}, clear=False):
        result = runner.invoke(main, ["serve", "--port", "9000", "--webhook-url", "http://hooks.test/chat"])
        assert os.environ["AICHAT_WEBHOOK_URL"] == "http://hooks.test/chat"
    assert result.exit_code == 0
    assert "http://127.0.0.1:9000" in result.output
    run.assert_called_once()
    assert run.call_args.args[0] == "aichat_workspace.server:app"
    assert run.call_args.kwargs["port"] == 9000
