from __future__ import annotations

import asyncio
import sys
import traceback
from typing import Any

from meratranslate.app.config import resolve_args
from meratranslate.app.diagnostics import hint_for_exception, summarize_exception
from meratranslate.app.logging_setup import setup_app_logger
from meratranslate.app.notifier import ConsoleNotifier, LoggingNotifier, MultiNotifier, Notifier
from meratranslate.app.services import AppServices, build_services
from meratranslate.audio.mic import SoundDeviceMicSource
from meratranslate.contracts import TranslationRecord
from meratranslate.live.speech_translate import SpeechTranslateBridge
from meratranslate.nlp.pipeline import InvalidInputError

HELP_TEXT = "Type text to translate. Commands: :listen, :history, :help, :quit"


def format_record(record: TranslationRecord) -> str:
    return (
        f"#{record.id} [{record.source_lang}->{record.target_lang}] "
        f"{record.source_text} => {record.translated_text}"
    )


async def translate_once(services: AppServices, text: str, source_lang: str, target_lang: str) -> int:
    try:
        record = await services.pipeline.translate(text, source_lang, target_lang)
    except InvalidInputError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    print(format_record(record))
    return 0


async def listen_once(
    services: AppServices,
    source_lang: str,
    target_lang: str,
    poll_sec: float = 0.05,
) -> int:
    records: list[TranslationRecord] = []

    def _on_record(record: TranslationRecord) -> None:
        records.append(record)
        print(format_record(record))

    bridge = SpeechTranslateBridge(
        pipeline=services.pipeline,
        source_lang=source_lang,
        target_lang=target_lang,
        on_record=_on_record,
        on_error=lambda e: print(f"Invalid input: {e}", file=sys.stderr),
        logger=services.logger.getChild("bridge"),
    )
    capture = services.speech_capture(bridge)
    await capture.mount()
    try:
        await capture.start()
        while capture.has_active_session:
            await asyncio.sleep(poll_sec)
        await bridge.drain()
    finally:
        capture.dispose()
    return 0 if records else 1


async def print_history(services: AppServices) -> None:
    records = await services.history.get_all()
    if not records:
        print("(no translations yet)")
        return
    for record in records:
        print(format_record(record))


async def interactive(services: AppServices, args: Any) -> int:
    print(HELP_TEXT)
    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            return 0
        cmd = line.strip()
        if not cmd:
            continue
        if cmd == ":quit":
            return 0
        if cmd == ":help":
            print(HELP_TEXT)
        elif cmd == ":history":
            await print_history(services)
        elif cmd == ":listen":
            await listen_once(services, args.source_lang, args.target_lang)
        else:
            await translate_once(services, cmd, args.source_lang, args.target_lang)


async def run(args: Any, services: AppServices) -> int:
    if args.text is not None:
        status = await translate_once(services, args.text, args.source_lang, args.target_lang)
    elif args.listen:
        status = await listen_once(services, args.source_lang, args.target_lang)
    else:
        status = await interactive(services, args)
    if args.show_history:
        await print_history(services)
    return status


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info(
        "app_start",
        extra={"config_path": str(args.config or ""), "argv": argv or [], "translator": args.translator},
    )

    notifiers: list[Notifier] = [LoggingNotifier(logger.getChild("notice"))]
    if args.print_console:
        notifiers.append(ConsoleNotifier())

    try:
        if args.list_devices:
            print(SoundDeviceMicSource.list_devices())
            return 0
        services = build_services(args, notifier=MultiNotifier(notifiers), logger=logger)
        return asyncio.run(run(args, services))
    except KeyboardInterrupt:
        logger.info("app_keyboard_interrupt")
        return 130
    except Exception:
        detail = traceback.format_exc()
        logger.exception("app_crash")
        summary = summarize_exception(detail)
        print(f"Error: {summary}", file=sys.stderr)
        print(f"Hint: {hint_for_exception(summary)}", file=sys.stderr)
        print(f"Logs: {log_path}", file=sys.stderr)
        return 1
    finally:
        logger.info("app_exit")


if __name__ == "__main__":
    raise SystemExit(main())
