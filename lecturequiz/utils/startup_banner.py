import logging
import platform
import sys
from typing import List, Tuple

import config
from lecturequiz.constants import APP_NAME, APP_VERSION

log = logging.getLogger("LectureQuiz")


def _mb(n: int) -> str:
    return f"{n / 1_000_000:g} MB"


def banner_rows(llm, *, address: str, max_sessions: int) -> List[Tuple[str, str]]:
    """What a user of this instance can expect: model, limits, where to connect."""
    api = llm.base_url.replace("http://", "").replace("https://", "")
    key = "api key" if getattr(llm, "api_key", "") else "no key"

    return [
        ("APP", f"{APP_NAME} v{APP_VERSION}"),
        ("ENV", "Production" if config.IS_PROD else "Development"),
        ("RUNTIME", f"Python {sys.version.split()[0]} on {platform.system()}"),
        ("MODEL", f"{llm.default_model} ({config.LLM_PROVIDER or 'local'}, {key})"),
        ("ENDPOINT", api),
        ("LECTURE", f">= {config.MIN_LECTURE_CHARS} chars, upload <= {_mb(config.MAX_UPLOAD_BYTES)}"),
        ("QUIZ", f"1-{config.MAX_QUESTIONS} questions"),
        ("SESSIONS", f"in memory, up to {max_sessions}"),
        ("SERVE", address),
    ]


def startup_banner(rows: List[Tuple[str, str]]) -> None:
    width = max(44, max(len(k) + len(v) + 3 for k, v in rows))
    label_width = max(len(k) for k, _ in rows)

    log.info("─" * width)
    for k, v in rows:
        log.info("%s : %s", k.ljust(label_width), v)
    log.info("─" * width)
