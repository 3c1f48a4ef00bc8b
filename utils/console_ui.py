"""Console presentation for the SRA demos: colours, banner, key/value lines."""
from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass, field
from typing import Dict

import colorama
import pyfiglet
from colorama import Fore, Style

__all__ = [
    "init",
    "banner",
    "section",
    "step_header",
    "kv",
    "kv_int",
    "preview_int",
    "bullet",
    "success",
    "warning",
    "error",
    "elapsed",
    "line",
]


@dataclass
class _Console:
    width: int = 100
    plain: bool = True
    styles: Dict[str, str] = field(default_factory=dict)
    symbols: Dict[str, str] = field(
        default_factory=lambda: {"success": "[OK]", "warning": "[!]", "error": "[X]", "bullet": "-"}
    )


_state = _Console()


def init(plain: bool = False) -> None:
    """Pick plain or coloured output; plain when NO_COLOR is set or stdout is not a TTY."""

    _state.width = shutil.get_terminal_size(fallback=(100, 24)).columns or 100
    is_tty = bool(getattr(sys.stdout, "isatty", lambda: False)())
    _state.plain = plain or bool(os.environ.get("NO_COLOR")) or not is_tty

    if _state.plain:
        _state.styles = {}
        _state.symbols = {"success": "[OK]", "warning": "[!]", "error": "[X]", "bullet": "-"}
        return

    colorama.init(autoreset=True)
    _state.styles = {
        "success": Fore.GREEN + Style.BRIGHT,
        "warning": Fore.YELLOW + Style.BRIGHT,
        "error": Fore.RED + Style.BRIGHT,
        "step": Fore.CYAN + Style.BRIGHT,
        "section": Fore.MAGENTA + Style.BRIGHT,
    }
    _state.symbols = {"success": "✓", "warning": "!", "error": "✗", "bullet": "•"}


def _paint(kind: str, text: str) -> str:
    style = _state.styles.get(kind)
    if not style:
        return text
    return f"{style}{text}{Style.RESET_ALL}"


def line(char: str = "-") -> None:
    print(char * max(1, _state.width))


def banner(title: str) -> None:
    if _state.plain:
        print(f"=== {title} ===".center(_state.width))
        return
    print(pyfiglet.figlet_format(title, width=_state.width))


def section(title: str) -> None:
    line("=")
    print(_paint("section", f" {title.upper()}"))
    line("=")


def step_header(i: int, n: int, title: str) -> None:
    print(_paint("step", f"[{i}/{n}] {title}"))


def kv(key: str, value: object) -> None:
    print(f"{key}: {value}")


def preview_int(value: int, radix: int = 16, head: int = 64) -> str:
    """Render *value* in *radix*, cut to *head* digits with an ellipsis."""

    digits = f"{value:x}" if radix == 16 else str(value)
    prefix = "0x" if radix == 16 else ""
    if len(digits) > head:
        return f"{prefix}{digits[:head]}… ({value.bit_length()} bits)"
    return f"{prefix}{digits}"


def kv_int(key: str, value: int, radix: int = 16) -> None:
    kv(key, preview_int(value, radix))


def bullet(msg: str) -> None:
    print(f"{_state.symbols['bullet']} {msg}")


def success(msg: str) -> None:
    print(_paint("success", f"{_state.symbols['success']} {msg}"))


def warning(msg: str) -> None:
    print(_paint("warning", f"{_state.symbols['warning']} {msg}"))


def error(msg: str) -> None:
    print(_paint("error", f"{_state.symbols['error']} {msg}"))


def elapsed(prefix: str, seconds: float) -> None:
    print(f"{prefix} {seconds:.2f}s")
