from __future__ import annotations

import argparse
import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from edgetrans.contracts import TranslationDirection
from edgetrans.errors import ConfigError

API_KEY_ENV = "OPENAI_API_KEY"

DEFAULTS: dict[str, Any] = {
    "list_devices": False,
    "device": None,
    "sr": 16000,
    "direction": None,
    "api_key": None,
    "local": False,
    "asr_timeout": None,
    "gemma_model": None,
    "gemma_ctx": 2048,
    "gemma_timeout": None,
    "translator": "gemma",
    "ui": False,
    "host": "0.0.0.0",
    "port": 8080,
    "verbose": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("edgetrans", "edgetrans"))
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


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or copy.deepcopy(DEFAULTS))
    return paths.config_path


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists()
    merged = copy.deepcopy(DEFAULTS)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    path = Path(config_path) if config_path else ensure_user_config_exists()
    existing = _known_only(_load_json_dict(path)) if path.exists() else {}
    merged = copy.deepcopy(DEFAULTS)
    merged.update(existing)
    merged.update(_known_only(values))
    _write_json_dict(path, merged)
    return path


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="edgetrans",
        description="Gemma-powered speech translator (Whisper API + Gemma translation)",
    )
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--wav", default=None, help="path to mono 16kHz WAV file")
    src.add_argument("--realtime", type=_positive_float, default=None, help="realtime mic capture (seconds)")
    p.add_argument(
        "--direction",
        default=defaults["direction"],
        choices=["es-en", "en-es"],
        help="translation direction",
    )
    p.add_argument("--api-key", default=defaults["api_key"], help=f"OpenAI API key (or set {API_KEY_ENV})")
    p.add_argument(
        "--local",
        action=argparse.BooleanOptionalAction,
        default=defaults["local"],
        help="use a local Whisper API instead of OpenAI",
    )
    p.add_argument(
        "--asr-timeout",
        type=_positive_float,
        default=defaults["asr_timeout"],
        help="transcription request timeout in seconds (default: none)",
    )
    p.add_argument("--gemma-model", default=defaults["gemma_model"], help="path to Gemma model (GGUF)")
    p.add_argument("--gemma-ctx", type=int, default=defaults["gemma_ctx"], help="context tokens for Gemma")
    p.add_argument(
        "--gemma-timeout",
        type=_positive_float,
        default=defaults["gemma_timeout"],
        help="llama.cpp subprocess timeout in seconds (default: none)",
    )
    p.add_argument(
        "--translator",
        default=defaults["translator"],
        choices=["gemma", "phrasebook"],
        help="translation backend",
    )
    p.add_argument("--ui", action="store_true", help="run local UI (http://localhost:PORT)")
    p.add_argument("--host", default=defaults["host"], help="UI bind address")
    p.add_argument("--port", type=int, default=defaults["port"], help="UI port")
    p.add_argument("--verbose", action="store_true", help="verbose logs")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="capture sample rate (Hz)")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = load_user_config(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    for flag in ("list_devices", "ui", "verbose"):
        if defaults.get(flag):
            setattr(args, flag, True)
    if not args.api_key:
        args.api_key = os.getenv(API_KEY_ENV) or None
    return args


def validate_args(args: argparse.Namespace) -> None:
    if not args.direction:
        raise ConfigError("--direction is required (es-en or en-es).")
    TranslationDirection.parse(str(args.direction))
    if not args.gemma_model and str(args.translator) == "gemma":
        raise ConfigError("--gemma-model is required (path to a GGUF model file).")
    if int(args.gemma_ctx) <= 0:
        raise ConfigError("--gemma-ctx must be > 0.")
    if args.ui:
        return
    if args.wav is None and args.realtime is None:
        raise ConfigError(
            "Either --wav or --realtime must be provided when not using --ui mode.\n"
            "Use --help for more information."
        )
