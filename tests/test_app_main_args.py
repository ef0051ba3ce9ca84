from __future__ import annotations

import json
from pathlib import Path

import pytest

from meratranslate.app.config import resolve_args


def _cfg(tmp_path: Path, payload: dict) -> str:
    cfg_path = tmp_path / "app.json"
    cfg_path.write_text(json.dumps(payload), encoding="utf-8")
    return str(cfg_path)


def test_resolve_args_cli_overrides_config(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, {"translator": "phrasebook", "target_lang": "fr", "sr": 16000})
    args = resolve_args(["--config", cfg, "--translator", "google", "--target", "de"])
    assert args.translator == "google"
    assert args.target_lang == "de"
    assert args.source_lang == "auto"
    assert args.sr == 16000


def test_resolve_args_optional_timeouts(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, {"request_timeout_sec": 3.0})
    args = resolve_args(["--config", cfg])
    assert args.request_timeout_sec == 3.0

    args = resolve_args(["--config", cfg, "--request-timeout-sec", "none", "--max-utter-sec", "off"])
    assert args.request_timeout_sec is None
    assert args.max_utter_sec is None


def test_resolve_args_modes(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, {})
    args = resolve_args(["--config", cfg, "--text", "hello", "--show-history", "--no-print-console"])
    assert args.text == "hello"
    assert args.listen is False
    assert args.show_history is True
    assert args.print_console is False


def test_resolve_args_debug_from_config(tmp_path: Path) -> None:
    args = resolve_args(["--config", _cfg(tmp_path, {"debug": True})])
    assert args.debug is True


def test_resolve_args_rejects_unknown_translator(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        resolve_args(["--config", _cfg(tmp_path, {}), "--translator", "deepl"])


def test_resolve_args_missing_config_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        resolve_args(["--config", str(tmp_path / "nope.json")])
