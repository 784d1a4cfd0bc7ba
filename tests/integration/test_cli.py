"""
Tests for the CLI client

The API is replaced by mocked httpx calls; argument handling and output
formatting are exercised for real.
"""

import json
from unittest.mock import Mock, patch

import httpx
import pytest

from api import cli


def mock_response(payload: dict, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


CONSULT_RESULT = {
    "question": "Should I lie?",
    "insights": [],
    "synthesis": {"content": "Synthesized from 2 perspectives", "confidence": 0.5},
    "engines_consulted": ["stoic", "kantian"],
    "overall_confidence": 0.5,
    "metadata": {"strategy": "weighted-average"},
}

DELIBERATION_RESULT = {
    "dilemma": "Should I lie?",
    "positions": [
        {"engine_id": "stoic", "tradition": "stoic", "position": "Focus on virtue", "confidence": 0.5},
        {"engine_id": "kantian", "tradition": "kantian", "position": "Impermissible", "confidence": 0.6},
    ],
    "tensions": [{"between": ["stoic", "kantian"], "traditions": ["stoic", "kantian"], "description": "stoic vs kantian"}],
    "recommendation": {"content": "Synthesis: Balancing kantian", "confidence": 0.55},
    "confidence": 0.55,
    "metadata": {},
}


class TestCLIRequests:
    """Test request construction"""

    def test_consult_payload(self):
        with patch("api.cli.httpx.request", return_value=mock_response(CONSULT_RESULT)) as request:
            result = cli.consult("Should I lie?", "http://api", domains=["ethics"], strategy="consensus")

        assert result == CONSULT_RESULT
        method, url = request.call_args.args
        assert method == "POST"
        assert url == "http://api/consult"
        assert request.call_args.kwargs["json"] == {
            "question": "Should I lie?",
            "domains": ["ethics"],
            "strategy": "consensus",
        }

    def test_deliberate_payload(self):
        with patch("api.cli.httpx.request", return_value=mock_response(DELIBERATION_RESULT)) as request:
            cli.deliberate("Should I lie?", "http://api", traditions=["stoic"])

        assert request.call_args.args == ("POST", "http://api/deliberate")
        assert request.call_args.kwargs["json"] == {"dilemma": "Should I lie?", "traditions": ["stoic"]}

    def test_list_engines_domain_param(self):
        with patch("api.cli.httpx.request", return_value=mock_response({"engines": []})) as request:
            cli.list_engines("http://api", domain="logic")

        assert request.call_args.args == ("GET", "http://api/engines")
        assert request.call_args.kwargs["params"] == {"domain": "logic"}

    def test_http_error_exits(self, capsys):
        """Test that an API error status exits non-zero with the detail"""
        request = httpx.Request("POST", "http://api/consult")
        response = httpx.Response(422, json={"detail": "bad strategy"}, request=request)

        with patch("api.cli.httpx.request", return_value=response):
            with pytest.raises(SystemExit) as exc_info:
                cli.consult("q", "http://api", strategy="vote")

        assert exc_info.value.code == 1
        assert "bad strategy" in capsys.readouterr().out

    def test_connection_error_exits(self, capsys):
        with patch("api.cli.httpx.request", side_effect=httpx.ConnectError("refused")):
            with pytest.raises(SystemExit):
                cli.list_engines("http://api")

        assert "Error contacting API" in capsys.readouterr().out


class TestCLIMain:
    """Test the main() entry point"""

    def test_consult_command(self, capsys):
        with patch("api.cli.httpx.request", return_value=mock_response(CONSULT_RESULT)) as request:
            cli.main(["--api-url", "http://api", "consult", "Should I lie?", "--domain", "ethics", "--domain", "logic"])

        assert request.call_args.kwargs["json"]["domains"] == ["ethics", "logic"]
        output = capsys.readouterr().out
        assert "CONSULTATION RESULT" in output
        assert "stoic, kantian" in output
        assert "0.500" in output

    def test_deliberate_command(self, capsys):
        with patch("api.cli.httpx.request", return_value=mock_response(DELIBERATION_RESULT)):
            cli.main(["deliberate", "Should I lie?"])

        output = capsys.readouterr().out
        assert "DELIBERATION RESULT" in output
        assert "stoic vs kantian" in output
        assert "Synthesis: Balancing kantian" in output

    def test_engines_command(self, capsys):
        listing = {"engines": [{"id": "stoic", "domain": "ethics", "tradition": "stoic", "status": "idle"}]}
        with patch("api.cli.httpx.request", return_value=mock_response(listing)):
            cli.main(["engines"])

        output = capsys.readouterr().out
        assert "1 engines registered" in output
        assert "stoic" in output

    def test_json_flag(self, capsys):
        with patch("api.cli.httpx.request", return_value=mock_response(CONSULT_RESULT)):
            cli.main(["--json", "consult", "q"])

        assert json.loads(capsys.readouterr().out) == CONSULT_RESULT

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 1

    def test_error_metadata_displayed(self, capsys):
        empty = {**CONSULT_RESULT, "synthesis": None, "engines_consulted": [], "metadata": {"error": "No engines available for this query"}}
        with patch("api.cli.httpx.request", return_value=mock_response(empty)):
            cli.main(["consult", "q"])

        output = capsys.readouterr().out
        assert "none" in output
        assert "No engines available for this query" in output
