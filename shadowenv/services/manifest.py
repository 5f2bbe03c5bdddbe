from __future__ import annotations

import os
import re
from pathlib import Path

from shadowenv.common.errors import ManifestError

_MODULE_RE = re.compile(r'^module\s+(?P<path>"(?:[^"\\]|\\.)*"|`[^`]*`|[^\s"`]+)\s*(?://.*)?$')


def module_path(data: str) -> str:
    """Extrae la ruta de la directiva `module` de un go.mod; "" si no hay."""

    for raw_line in data.splitlines():
        line = raw_line.strip()
        m = _MODULE_RE.match(line)
        if not m:
            continue
        path = m.group("path")
        if path[0] == '"':
            return path[1:-1].replace('\\"', '"').replace("\\\\", "\\")
        if path[0] == "`":
            return path[1:-1]
        return path
    return ""


def read_module_path(path: str | os.PathLike[str] = "go.mod") -> str:
    """Lee el manifiesto y devuelve el módulo actual."""

    manifest = Path(path)
    try:
        data = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"{manifest.name} cannot be read or does not exist") from exc
    mod = module_path(data)
    if not mod:
        raise ManifestError(f"{manifest.name} is malformed")
    return mod
