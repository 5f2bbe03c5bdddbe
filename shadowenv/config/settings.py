from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic import AliasChoices


class Settings(BaseSettings):
    """Configuración del entorno sombra (se carga desde variables de entorno `SHADOWENV_*`)."""

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
    }

    env_file: str = Field(
        default=".env",
        description="Fichero de overrides que se carga por defecto (relativo al directorio actual)",
        validation_alias=AliasChoices("SHADOWENV_ENV_FILE", "shadowenv_env_file"),
    )
    encoding: str = Field(
        default="utf-8",
        description="Codificación de los ficheros `.env`",
        validation_alias=AliasChoices("SHADOWENV_ENCODING", "shadowenv_encoding"),
    )
    toolchain_bin: str = Field(
        default="go",
        description="Binario de la toolchain a consultar para la ruta por defecto",
        validation_alias=AliasChoices("SHADOWENV_TOOLCHAIN_BIN", "shadowenv_toolchain_bin"),
    )
    mode_var: str = Field(
        default="GO_ENV",
        description="Variable que indica el modo de ejecución",
        validation_alias=AliasChoices("SHADOWENV_MODE_VAR", "shadowenv_mode_var"),
    )
    test_mode_value: str = Field(
        default="test",
        description="Valor del modo cuando se detecta ejecución bajo tests",
        validation_alias=AliasChoices("SHADOWENV_TEST_MODE_VALUE", "shadowenv_test_mode_value"),
    )
    path_var: str = Field(
        default="GOPATH",
        description="Variable con la ruta de módulos de la toolchain",
        validation_alias=AliasChoices("SHADOWENV_PATH_VAR", "shadowenv_path_var"),
    )
    manifest_file: str = Field(
        default="go.mod",
        description="Manifiesto del que se extrae el módulo actual",
        validation_alias=AliasChoices("SHADOWENV_MANIFEST_FILE", "shadowenv_manifest_file"),
    )

    def toolchain_query(self) -> list[str]:
        """Argumentos para preguntar a la toolchain por su ruta por defecto."""

        return [self.toolchain_bin, "env", self.path_var]
