from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

APP_NAME = "MeraTranslate"

DEFAULTS: dict[str, Any] = {
    "translator": "google",
    "endpoint_url": "https://translate.googleapis.com/translate_a/single",
    "client_id": "gtx",
    "output_format": "t",
    "request_timeout_sec": None,
    "source_lang": "auto",
    "target_lang": "es",
    "recognition_language": "en-US",
    "history_delay_sec": 0.5,
    "model": "tiny",
    "device": None,
    "sr": 16000,
    "channels": 1,
    "chunk_sec": 0.5,
    "rms_th": 250.0,
    "silence_chunks": 2,
    "min_utter_sec": 0.3,
    "max_utter_sec": 8.0,
    "no_speech_timeout_sec": 5.0,
    "print_console": True,
    "debug": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())
TRANSLATORS: tuple[str, ...] = ("google", "argos", "phrasebook")


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def default_asset_config_path() -> Path:
    return Path(__file__).resolve().parents[2] / "assets" / "config" / "default.json"


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir(APP_NAME, APP_NAME))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: payload[key] for key in CONFIG_KEYS if key in payload}


def load_default_config() -> dict[str, Any]:
    out = copy.deepcopy(DEFAULTS)
    path = default_asset_config_path()
    if path.exists():
        out.update(_known_only(_load_json_dict(path)))
    return out


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    merged = dict(defaults)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    defaults = load_default_config()
    if config_path:
        path = Path(config_path)
        existing = _known_only(_load_json_dict(path)) if path.exists() else {}
    else:
        path = ensure_user_config_exists(defaults)
        existing = _known_only(_load_json_dict(path))
    merged = dict(defaults)
    merged.update(existing)
    merged.update(_known_only(values))
    _write_json_dict(path, merged)
    return path


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def _optional_float(value: str) -> float | None:
    if value.strip().lower() in ("", "none", "off"):
        return None
    return float(value)


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="meratranslate", description="Translate typed or spoken text.")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--text", default=None, help="translate this text once and exit")
    p.add_argument("--listen", action="store_true", help="capture one spoken utterance and translate it")
    p.add_argument("--show-history", action="store_true", help="print the translation history on exit")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--translator", default=defaults["translator"], choices=list(TRANSLATORS))
    p.add_argument("--endpoint-url", default=defaults["endpoint_url"], help="translation endpoint URL")
    p.add_argument("--client-id", default=defaults["client_id"], help="endpoint client identifier")
    p.add_argument("--output-format", default=defaults["output_format"], help="endpoint dt= selector")
    p.add_argument(
        "--request-timeout-sec",
        type=_optional_float,
        default=defaults["request_timeout_sec"],
        help="endpoint timeout in seconds ('none' waits forever)",
    )
    p.add_argument("--source", dest="source_lang", default=defaults["source_lang"], help="source language or 'auto'")
    p.add_argument("--target", dest="target_lang", default=defaults["target_lang"], help="target language")
    p.add_argument(
        "--recognition-language",
        default=defaults["recognition_language"],
        help="speech recognition language tag",
    )
    p.add_argument(
        "--history-delay-sec",
        type=float,
        default=defaults["history_delay_sec"],
        help="simulated latency of history accessors",
    )
    p.add_argument("--model", default=defaults["model"], help="faster-whisper model size")
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="sample rate (Hz)")
    p.add_argument("--channels", type=int, default=defaults["channels"], help="input channels")
    p.add_argument("--chunk-sec", type=float, default=defaults["chunk_sec"], help="mic chunk size in seconds")
    p.add_argument("--rms-th", type=float, default=defaults["rms_th"], help="RMS threshold for speech")
    p.add_argument(
        "--silence-chunks",
        type=int,
        default=defaults["silence_chunks"],
        help="finalize after this many non-speech chunks",
    )
    p.add_argument(
        "--min-utter-sec",
        type=float,
        default=defaults["min_utter_sec"],
        help="ignore utterances shorter than this",
    )
    p.add_argument(
        "--max-utter-sec",
        type=_optional_float,
        default=defaults["max_utter_sec"],
        help="force finalize while continuously speaking (seconds)",
    )
    p.add_argument(
        "--no-speech-timeout-sec",
        type=_optional_float,
        default=defaults["no_speech_timeout_sec"],
        help="give up when nothing is heard for this long",
    )
    p.add_argument(
        "--print-console",
        action=argparse.BooleanOptionalAction,
        default=defaults["print_console"],
        help="print notices to the console",
    )
    p.add_argument("--debug", action="store_true", help="verbose logging")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("debug"):
        args.debug = True
    return args
