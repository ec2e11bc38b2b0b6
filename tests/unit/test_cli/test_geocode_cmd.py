"""Unit tests for the geocode CLI commands."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from geobatch.cli.app import app
from geobatch.lib.geocoder.base import ProviderMatch, ProviderResponse

runner = CliRunner()


def _found() -> ProviderResponse:
    return ProviderResponse(status="OK", matches=[ProviderMatch(latitude=37.5663, longitude=126.9779, distance=1.0)])


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    output_dir = tmp_path / "outputs"
    monkeypatch.setenv("NAVER_CLIENT_ID", "id")
    monkeypatch.setenv("NAVER_CLIENT_SECRET", "secret")
    monkeypatch.setenv("OUTPUT_DIR", str(output_dir))
    monkeypatch.setenv("GEOCODER_RATE_LIMIT_PER_SECOND", "1000")
    monkeypatch.delenv("LOG_DIR", raising=False)
    return output_dir


class TestNormalizeCommand:
    """Tests for `geocode normalize`."""

    def test_prints_normalized_form(self) -> None:
        result = runner.invoke(app, ["geocode", "normalize", "서울  강남구 테헤란로 152"])
        assert result.exit_code == 0
        assert "Normalized:  서울특별시 강남구 테헤란로 152" in result.output
        assert "Confidence:  100" in result.output
        assert "서울 → 서울특별시" in result.output


class TestRunCommand:
    """Tests for `geocode run`."""

    def test_runs_job_and_writes_artifacts(self, credentials: Path, tmp_path: Path) -> None:
        source = tmp_path / "addresses.txt"
        source.write_text("서울 중구 세종대로 110\n\n서울특별시 중구 세종대로 110\n", encoding="utf-8")

        with patch(
            "geobatch.lib.geocoder.naver.NaverGeocoder.lookup", new_callable=AsyncMock, return_value=_found()
        ) as mock_lookup:
            result = runner.invoke(app, ["geocode", "run", str(source)])

        assert result.exit_code == 0, result.output
        assert "Batch completed:" in result.output
        assert "Processed:    2" in result.output
        assert "Succeeded:    2" in result.output
        assert mock_lookup.await_count == 1
        assert len(list(credentials.glob("results_*.csv"))) == 1
        assert len(list(credentials.glob("report_*.md"))) == 1

    def test_output_dir_option(self, credentials: Path, tmp_path: Path) -> None:
        source = tmp_path / "addresses.txt"
        source.write_text("부산 해운대구 우동 1\n", encoding="utf-8")
        custom = tmp_path / "custom"

        with patch("geobatch.lib.geocoder.naver.NaverGeocoder.lookup", new_callable=AsyncMock, return_value=_found()):
            result = runner.invoke(
                app, ["geocode", "run", str(source), "--output-dir", str(custom), "--concurrency", "2"]
            )

        assert result.exit_code == 0, result.output
        assert len(list(custom.glob("errors_*.csv"))) == 1

    def test_missing_credentials(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("NAVER_CLIENT_ID", "")
        monkeypatch.setenv("NAVER_CLIENT_SECRET", "")
        source = tmp_path / "addresses.txt"
        source.write_text("서울 중구\n", encoding="utf-8")

        result = runner.invoke(app, ["geocode", "run", str(source)])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_empty_file(self, credentials: Path, tmp_path: Path) -> None:
        source = tmp_path / "empty.txt"
        source.write_text("\n  \n", encoding="utf-8")
        result = runner.invoke(app, ["geocode", "run", str(source)])
        assert result.exit_code == 1
        assert "No addresses found" in result.output

    def test_missing_file(self) -> None:
        result = runner.invoke(app, ["geocode", "run", "/nonexistent/addresses.txt"])
        assert result.exit_code != 0
