import click

from shadowenv.common.errors import DecodeError, EnvironmentWriteError, FileAccessError, ManifestError, NotFound
from shadowenv.services import shadow


@click.group(help="Entorno sombra: consulta variables sin tocar el entorno real. Usa los subcomandos.")
def cli() -> None:
    pass


@cli.command("get", help="Muestra el valor de una variable (o el valor por defecto).")
@click.argument("name")
@click.option("--default", "fallback", default="", help="Valor si la variable no existe")
def get(name: str, fallback: str) -> None:
    click.echo(shadow.get(name, fallback))


@cli.command("must-get", help="Muestra el valor de una variable; falla si no existe.")
@click.argument("name")
def must_get(name: str) -> None:
    try:
        click.echo(shadow.must_get(name))
    except NotFound as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("list", help="Lista todas las variables como NOMBRE=valor, ordenadas.")
@click.option("--env-file", "env_files", multiple=True, type=click.Path(dir_okay=False), help="Ficheros .env a cargar antes (en orden)")
def list_(env_files: tuple[str, ...]) -> None:
    if env_files:
        try:
            shadow.load(*env_files)
        except (FileAccessError, DecodeError, EnvironmentWriteError) as exc:
            raise click.ClickException(str(exc)) from exc
    for line in sorted(shadow.environ()):
        click.echo(line)


@cli.command("gopath", help="Muestra la ruta de módulos de la toolchain.")
def gopath() -> None:
    click.echo(shadow.go_path())


@cli.command("module", help="Muestra el módulo declarado en el manifiesto (go.mod).")
@click.option("--path", "manifest", type=click.Path(dir_okay=False), help="Ruta al manifiesto")
def module(manifest: str | None) -> None:
    try:
        click.echo(shadow.current_module(manifest))
    except ManifestError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    cli()
