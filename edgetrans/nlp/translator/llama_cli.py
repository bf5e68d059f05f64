from __future__ import annotations

import logging
import subprocess
from typing import Callable, Optional, Sequence, Tuple

from edgetrans.contracts import TranslationDirection
from edgetrans.errors import ExternalTranslatorError
from edgetrans.probing import AllCandidatesFailed, first_success

logger = logging.getLogger(__name__)

EXECUTABLES: Tuple[str, ...] = ("llama", "llama-cli", "main", "./llama.cpp/main")
MAX_NEW_TOKENS = 256
TEMPERATURE = 0.1
BATCH_SIZE = 1
MODEL_TURN_MARKER = "<start_of_turn>model"

SYSTEM_PROMPTS = {
    TranslationDirection.ES_TO_EN: (
        "You are a professional translator. Translate the following Spanish text to English. "
        "Only provide the translation, nothing else."
    ),
    TranslationDirection.EN_TO_ES: (
        "You are a professional translator. Translate the following English text to Spanish. "
        "Only provide the translation, nothing else."
    ),
}

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def build_prompt(direction: TranslationDirection, text: str) -> str:
    return (
        f"<start_of_turn>system\n{SYSTEM_PROMPTS[direction]}\n<end_of_turn>\n"
        f"<start_of_turn>user\n{text.strip()}\n<end_of_turn>\n"
        f"{MODEL_TURN_MARKER}\n"
    )


def extract_model_output(stdout: str) -> str:
    """
    Text after the first model-turn marker and its newline, stripped.
    Returns "" when the marker or the newline is missing.
    """
    start = stdout.find(MODEL_TURN_MARKER)
    if start < 0:
        return ""
    newline = stdout.find("\n", start)
    if newline < 0:
        return ""
    return stdout[newline + 1 :].strip()


def build_command(exe: str, model_path: str, prompt: str, n_ctx: int) -> list[str]:
    return [
        exe,
        "-m", model_path,
        "-p", prompt,
        "-c", str(n_ctx),
        "-n", str(MAX_NEW_TOKENS),
        "--temp", str(TEMPERATURE),
        "-b", str(BATCH_SIZE),
    ]


def invoke_external_translator(
    model_path: str,
    prompt: str,
    n_ctx: int,
    *,
    executables: Sequence[str] = EXECUTABLES,
    timeout: Optional[float] = None,
    runner: Runner = subprocess.run,
) -> str:
    def _attempt(exe: str) -> str:
        proc = runner(
            build_command(exe, model_path, prompt, n_ctx),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
        if proc.returncode != 0:
            raise ExternalTranslatorError(f"exit code {proc.returncode}")
        out = extract_model_output(proc.stdout or "")
        if not out:
            raise ExternalTranslatorError("no model output after turn marker")
        return out

    def _log_failure(exe: str, err: Exception) -> None:
        logger.debug("llama_cli_failed", extra={"executable": exe, "error": str(err)})

    try:
        found = first_success(executables, _attempt, on_failure=_log_failure)
    except AllCandidatesFailed as e:
        raise ExternalTranslatorError(f"No working llama.cpp executable found: {e}") from e
    logger.debug("llama_cli_selected", extra={"executable": found.candidate})
    return found.value
