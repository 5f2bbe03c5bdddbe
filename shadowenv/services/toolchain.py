from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Callable, List

logger = logging.getLogger(__name__)


def run_command(argv: List[str]) -> str:
    """Ejecuta `argv` de forma bloqueante (sin timeout) y devuelve su stdout."""

    completed = subprocess.run(argv, capture_output=True, text=True, check=True)
    return completed.stdout


def running_under_test() -> bool:
    """True si el proceso corre bajo pytest."""

    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def query_default_path(argv: List[str], run: Callable[[List[str]], str] = run_command) -> str | None:
    """Pregunta a la toolchain por su ruta por defecto.

    Best-effort: si el binario no existe, falla o no responde nada, devuelve None.
    """
    try:
        out = run(argv)
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("toolchain_query_failed", extra={"argv": argv, "error": str(exc)})
        return None
    path = out.strip()
    return path or None
