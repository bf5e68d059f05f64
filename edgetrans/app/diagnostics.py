from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    if not text:
        return "Unknown runtime error."
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return "Unknown runtime error."
    for ln in reversed(lines):
        if ln.startswith("File "):
            continue
        if ln.startswith("^"):
            continue
        if ln.startswith("Traceback "):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "api key required" in s:
        return "Export OPENAI_API_KEY, pass --api-key, or use --local with a local Whisper server."
    if "no local whisper api" in s:
        return "Start a Whisper server on localhost:8000 or localhost:5000, or drop --local."
    if "model not found" in s:
        return "Download a GGUF Gemma model and point --gemma-model at it."
    if "no speech detected" in s:
        return "The recording had no recognizable speech. Speak closer to the mic or check the file."
    if "openai api error" in s or "failed to send request" in s:
        return "The hosted transcription API rejected the request. Check the key and network."
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "microphone" in s or "sounddevice" in s:
        return "Microphone init failed. Check input device selection and app mic permissions."
    return "Check logs for full traceback."
