from __future__ import annotations

from pathlib import Path

import pytest

from lidlstock.cli import build_parser, main
from lidlstock.stock import StockReport


def test_check_rejects_malformed_postcode() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["check", "https://www.lidl.at/p/x/p100", "--postcode", "10a0"])


def test_missing_stock_api_exits(monkeypatch) -> None:
    monkeypatch.setattr("lidlstock.config.load_dotenv", lambda: False)
    monkeypatch.delenv("LIDL_STOCK_API", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["stores", "--cached"])

    assert excinfo.value.code == 1


def test_cached_store_listing_without_cache(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setattr("lidlstock.config.load_dotenv", lambda: False)
    monkeypatch.setenv("LIDL_STOCK_API", "https://stock.example/api/")
    monkeypatch.setenv("STORE_CACHE_PATH", str(tmp_path / "stores.json"))

    assert main(["stores", "--cached"]) == 0
    assert "No cached store data found." in capsys.readouterr().out


def test_refresh_without_maps_config_exits(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("lidlstock.config.load_dotenv", lambda: False)
    monkeypatch.setenv("LIDL_STOCK_API", "https://stock.example/api/")
    monkeypatch.setenv("STORE_CACHE_PATH", str(tmp_path / "stores.json"))
    monkeypatch.delenv("MAPS_HOST", raising=False)
    monkeypatch.delenv("MAPS_API_KEY", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["stores"])

    assert excinfo.value.code == 1
    assert not (tmp_path / "stores.json").exists()


class RecordingService:
    def __init__(self, report) -> None:
        self.report = report
        self.calls: list[tuple[str, str | None, str | None]] = []

    def check_product(self, url: str, variant_choice: str | None = None, postal_code: str | None = None):
        self.calls.append((url, variant_choice, postal_code))
        return self.report


def _patch_service(monkeypatch, service: RecordingService) -> None:
    monkeypatch.setattr("lidlstock.config.load_dotenv", lambda: False)
    monkeypatch.setenv("LIDL_STOCK_API", "https://stock.example/api/")
    monkeypatch.setattr("lidlstock.cli.build_service", lambda config, headless=None: service)


def test_check_passes_variant_and_postcode(monkeypatch) -> None:
    service = RecordingService(StockReport())
    _patch_service(monkeypatch, service)

    code = main(["check", "https://www.lidl.at/p/x/p100", "--variant", "2", "--postcode", "1010"])

    assert code == 0
    assert service.calls == [("https://www.lidl.at/p/x/p100", "2", "1010")]


def test_check_without_postcode_skips_filter_prompt(monkeypatch) -> None:
    service = RecordingService(StockReport())
    _patch_service(monkeypatch, service)

    main(["check", "https://www.lidl.at/p/x/p100"])

    assert service.calls == [("https://www.lidl.at/p/x/p100", None, "")]


@pytest.mark.parametrize("report", [None, StockReport(has_data=False)])
def test_check_exit_code_when_nothing_found(monkeypatch, report) -> None:
    service = RecordingService(report)
    _patch_service(monkeypatch, service)

    assert main(["check", "https://www.lidl.at/p/x/p100"]) == 1
