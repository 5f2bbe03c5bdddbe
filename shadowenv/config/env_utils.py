from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, MutableMapping

from dotenv.parser import parse_stream
from dotenv.variables import parse_variables

from shadowenv.common.errors import DecodeError, EnvironmentWriteError, FileAccessError

logger = logging.getLogger(__name__)


def decode_env_file(
    path: str | os.PathLike[str],
    encoding: str = "utf-8",
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Decodifica un fichero `.env` y devuelve sus pares clave/valor.

    Usa el parser de python-dotenv (comillas, `export`, comentarios) y
    resuelve `${VAR}` / `${VAR:-defecto}` contra las claves previas del
    fichero y, después, contra `environ` (por defecto `os.environ`).
    Sentencias inválidas o claves sin `=` son `DecodeError`. Ante claves
    duplicadas gana la última.
    """
    env_path = Path(path)
    bindings = []
    try:
        with env_path.open(encoding=encoding) as fh:
            for binding in parse_stream(fh):
                if binding.error:
                    raise DecodeError(env_path, binding.original.line)
                if binding.key is None:
                    continue
                if binding.value is None:
                    raise DecodeError(env_path, binding.original.line, f"missing '=' after {binding.key!r}")
                bindings.append((binding.key, binding.value))
    except UnicodeDecodeError as exc:
        raise DecodeError(env_path, None, str(exc)) from exc
    except OSError as exc:
        raise FileAccessError(env_path, exc.strerror or str(exc)) from exc
    base = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key, raw in bindings:
        # las claves del propio fichero tienen prioridad sobre el entorno
        scope = {**base, **values}
        values[key] = "".join(atom.resolve(scope) for atom in parse_variables(raw))
    return values


def merge_into(environ: MutableMapping[str, str], values: Dict[str, str]) -> None:
    """Escribe `values` en `environ` sobrescribiendo lo existente.

    Se detiene en la primera clave rechazada; las anteriores quedan escritas.
    """

    for k, v in values.items():
        try:
            environ[k] = v
        except (ValueError, OSError) as exc:
            raise EnvironmentWriteError(k, str(exc)) from exc
    logger.debug("env_merged", extra={"keys": sorted(values)})
