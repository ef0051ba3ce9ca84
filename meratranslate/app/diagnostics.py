from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    lines = [ln.strip() for ln in str(detail or "").splitlines() if ln.strip()]
    if not lines:
        return "Unknown error."
    meaningful = [
        ln for ln in lines if not ln.startswith(("File ", "^", "Traceback ", "During handling", "The above"))
    ]
    out = meaningful[-1] if meaningful else lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "no module named 'faster_whisper'" in s or "no module named 'sounddevice'" in s:
        return "Speech input needs faster-whisper and sounddevice. Install them and retry."
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "portaudio" in s or ("microphone" in s and "failed" in s):
        return "Microphone init failed. Check input device selection and mic permissions."
    if "connecterror" in s or "translation api" in s:
        return "Translation endpoint unreachable; offline phrasebook results were used."
    return "Check logs for full traceback."
