from __future__ import annotations

from pathlib import Path


class ShadowEnvError(Exception):
    """Error base del entorno sombra."""


class NotFound(ShadowEnvError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"could not find ENV var with {name}")
        self.name = name


class EnvironmentWriteError(ShadowEnvError):
    """El entorno real del proceso rechazó la escritura (nombre inválido, NUL, etc.)."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"could not set ENV var {name!r}: {reason}")
        self.name = name


class FileAccessError(ShadowEnvError, OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot access env file {str(path)!r}: {reason}")
        self.path = path


class DecodeError(ShadowEnvError, ValueError):
    """Contenido mal formado en un fichero `.env`.

    `line` es 1-based; None cuando el fallo no es atribuible a una línea (p.ej. codificación).
    """

    def __init__(self, path: Path, line: int | None, reason: str = "malformed statement") -> None:
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"cannot decode env file {where}: {reason}")
        self.path = path
        self.line = line


class ManifestError(ShadowEnvError):
    pass
