"""Entorno sombra: copia en memoria de las variables de entorno del proceso.

Permite leer variables con valor por defecto, sobrescribirlas sin tocar
`os.environ` (`set`) o tocándolo (`must_set`), cargar ficheros `.env` y
ejecutar código sobre una copia desechable del entorno (`temp`).

Uso:
    from shadowenv.services import shadow
    shadow.get("DATABASE_URL", "sqlite://")
    shadow.load(".env", "test_env/.env")   # el último fichero gana
"""

from __future__ import annotations

import functools
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, MutableMapping

from shadowenv.common.errors import DecodeError, EnvironmentWriteError, FileAccessError, NotFound
from shadowenv.config.env_utils import decode_env_file, merge_into
from shadowenv.config.settings import Settings
from shadowenv.services import toolchain
from shadowenv.services.manifest import read_module_path
from shadowenv.services.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class ShadowEnvironment:
    """Mapa nombre→valor protegido por un único cerrojo lectores/escritor.

    Su contenido es, de menor a mayor prioridad: el entorno del SO en el
    último `reload`, los ficheros `.env` cargados desde entonces y los
    `set`/`must_set` explícitos.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        os_env: MutableMapping[str, str] | None = None,
        decode: Callable[[Path], Dict[str, str]] | None = None,
        run_command: Callable[[List[str]], str] | None = None,
        test_probe: Callable[[], bool] | None = None,
        autoload: bool = True,
    ) -> None:
        self.settings = settings or Settings()
        self._os_env = os.environ if os_env is None else os_env
        self._decode = decode or functools.partial(
            decode_env_file, encoding=self.settings.encoding, environ=self._os_env
        )
        self._run_command = run_command or toolchain.run_command
        self._test_probe = test_probe or toolchain.running_under_test
        self._lock = ReadWriteLock()
        self._entries: Dict[str, str] = {}
        if autoload:
            try:
                self.load()
            except (FileAccessError, DecodeError, EnvironmentWriteError) as exc:
                logger.debug("default_env_file_skipped", extra={"error": str(exc)})
                self.reload()

    # ===== Lectura =====
    def get(self, name: str, fallback: str = "") -> str:
        with self._lock.read_locked():
            return self._entries.get(name, fallback)

    def must_get(self, name: str) -> str:
        with self._lock.read_locked():
            try:
                return self._entries[name]
            except KeyError:
                raise NotFound(name) from None

    def map(self) -> Dict[str, str]:
        """Copia independiente del mapa completo."""

        with self._lock.read_locked():
            return dict(self._entries)

    def environ(self) -> List[str]:
        """Entradas como `NOMBRE=valor` (orden no garantizado)."""

        with self._lock.read_locked():
            return [f"{k}={v}" for k, v in self._entries.items()]

    def go_path(self) -> str:
        return self.get("GOPATH", "")

    def go_bin(self) -> str:
        return self.get("GO_BIN", "go")

    # ===== Escritura =====
    def set(self, name: str, value: str) -> None:
        """Fija `name` sólo en el entorno sombra; `os.environ` no se toca."""

        with self._lock.write_locked():
            self._entries[name] = value

    def must_set(self, name: str, value: str) -> None:
        """Fija `name` en el entorno real y, si el SO lo acepta, también en la sombra."""

        with self._lock.write_locked():
            try:
                self._os_env[name] = value
            except (ValueError, OSError) as exc:
                raise EnvironmentWriteError(name, str(exc)) from exc
            self._entries[name] = value

    def reload(self) -> None:
        """Descarta el mapa y lo reconstruye desde el entorno del SO.

        Todo ocurre bajo una única adquisición de escritura: los lectores
        nunca ven un mapa a medio construir.
        """
        s = self.settings
        with self._lock.write_locked():
            entries: Dict[str, str] = {}
            # modo test: sólo en la sombra, el SO no se toca
            if not self._os_env.get(s.mode_var) and self._test_probe():
                entries[s.mode_var] = s.test_mode_value
            if not self._os_env.get(s.path_var):
                self._seed_toolchain_path()
            entries.update(self._os_env.items())
            self._entries = entries
        logger.debug("shadow_reload", extra={"entries": len(entries)})

    def _seed_toolchain_path(self) -> None:
        s = self.settings
        path = toolchain.query_default_path(s.toolchain_query(), run=self._run_command)
        if path is None:
            return
        try:
            self._os_env[s.path_var] = path
        except (ValueError, OSError) as exc:
            logger.debug("toolchain_path_not_set", extra={"env_var": s.path_var, "error": str(exc)})

    def load(self, *files: str | os.PathLike[str]) -> None:
        """Carga ficheros `.env` en orden; redefiniciones posteriores ganan.

        Sin argumentos intenta el fichero por defecto (`Settings.env_file`).
        Con ficheros, se detiene en el primer error (`FileAccessError` o
        `DecodeError`) sin deshacer los ya aplicados. Si el SO rechaza alguna
        clave al volcarla se propaga `EnvironmentWriteError`.
        """
        if not files:
            self._apply(Path(self.settings.env_file))
            return
        for file in files:
            path = Path(file)
            try:
                path.stat()
            except OSError as exc:
                raise FileAccessError(path, exc.strerror or str(exc)) from exc
            self._apply(path)

    def _apply(self, path: Path) -> None:
        values = self._decode(path)
        try:
            merge_into(self._os_env, values)
        finally:
            # recargar aunque el volcado quede a medias: la sombra sigue al SO
            self.reload()
        logger.debug("env_file_loaded", extra={"env_path": str(path), "keys": len(values)})

    # ===== Sustitución temporal =====
    @contextmanager
    def temporary(self) -> Iterator["ShadowEnvironment"]:
        """Trabaja sobre una copia del mapa y restaura el original al salir.

        ATENCIÓN: NO es seguro usarlo desde varios hilos, ni junto a código
        que llame a get/set desde otro hilo. El intercambio no mantiene el
        cerrojo durante la ejecución.
        """
        original = self._entries
        self._entries = dict(original)
        try:
            yield self
        finally:
            self._entries = original

    def temp(self, action: Callable[[], object]) -> None:
        """Ejecuta `action` sobre una copia desechable del entorno (útil en tests).

        ATENCIÓN: NO es seguro usarlo desde varios hilos, ni junto a código
        que llame a get/set desde otro hilo.
        """
        with self.temporary():
            action()


# ===== Instancia del proceso =====
default_env = ShadowEnvironment()


def default() -> ShadowEnvironment:
    return default_env


def get(name: str, fallback: str = "") -> str:
    return default_env.get(name, fallback)


def must_get(name: str) -> str:
    return default_env.must_get(name)


def set(name: str, value: str) -> None:  # noqa: A001
    default_env.set(name, value)


def must_set(name: str, value: str) -> None:
    default_env.must_set(name, value)


def reload() -> None:
    default_env.reload()


def load(*files: str | os.PathLike[str]) -> None:
    default_env.load(*files)


def map() -> Dict[str, str]:  # noqa: A001
    return default_env.map()


def environ() -> List[str]:
    return default_env.environ()


def temp(action: Callable[[], object]) -> None:
    default_env.temp(action)


def temporary():  # noqa: ANN201
    return default_env.temporary()


def go_path() -> str:
    return default_env.go_path()


def go_bin() -> str:
    return default_env.go_bin()


def current_module(path: str | os.PathLike[str] | None = None) -> str:
    """Módulo declarado en el manifiesto (go.mod por defecto)."""

    return read_module_path(path or default_env.settings.manifest_file)
