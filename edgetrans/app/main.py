from __future__ import annotations

import sys
import traceback

from edgetrans.app.config import resolve_args, validate_args
from edgetrans.app.diagnostics import hint_for_exception, summarize_exception
from edgetrans.app.logging_setup import setup_app_logger
from edgetrans.app.pipeline import transcribe_input, translate_transcript
from edgetrans.app.services import build_pipeline_services
from edgetrans.audio.mic import SoundDeviceMicSource
from edgetrans.contracts import TranslationDirection
from edgetrans.errors import EdgeTransError


def _report(stage: str, err: BaseException) -> None:
    summary = summarize_exception(str(err))
    print(f"{stage} error: {err}", file=sys.stderr)
    print(f"Hint: {hint_for_exception(summary)}", file=sys.stderr)


def _run_ui(args, logger) -> int:
    from edgetrans.web.server import ServiceContext, run

    context = ServiceContext(
        model_path=str(args.gemma_model or ""),
        n_ctx=int(args.gemma_ctx),
        provider=str(args.translator),
        timeout=args.gemma_timeout,
    )
    print(f"UI: http://localhost:{int(args.port)}")
    logger.info("ui_start", extra={"host": str(args.host), "port": int(args.port)})
    run(context, host=str(args.host), port=int(args.port), verbose=bool(args.verbose))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(verbose=bool(args.verbose))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "ui": bool(args.ui)})

    if args.list_devices:
        try:
            print(SoundDeviceMicSource.list_devices())
        except EdgeTransError as e:
            _report("Device", e)
            return 1
        return 0

    try:
        validate_args(args)
    except EdgeTransError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.ui:
        return _run_ui(args, logger)

    direction = TranslationDirection.parse(str(args.direction))
    services = build_pipeline_services(args)

    stage = "ASR" if args.wav is not None else "Recording"
    try:
        transcript = transcribe_input(args, services, logger=logger)
    except (EdgeTransError, OSError, ValueError) as e:
        logger.error("asr_failed", extra={"stage": stage, "detail": traceback.format_exc()})
        _report(stage, e)
        return 1

    try:
        res = translate_transcript(transcript.text, direction, services, logger=logger)
    except EdgeTransError as e:
        logger.error("translate_failed", extra={"detail": traceback.format_exc()})
        _report("Translation", e)
        return 1

    print(res.translated_text)
    logger.info("app_done", extra={"log_path": str(log_path)})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
