"""CLI interface for pycities."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
import httpx

from .auth import Auth
from .config import Config, Site, default_config_file
from .exceptions import NeocitiesError
from .output import OutputFormatter
from .sync import SyncEngine, remote_tree

logger = logging.getLogger(__name__)


def verbosity_level(verbose: int, quiet: int) -> int:
    """Map -v/-q counts to a logging level (default: INFO)."""
    levels = [
        logging.CRITICAL + 1,
        logging.ERROR,
        logging.WARNING,
        logging.INFO,
        logging.DEBUG,
    ]
    numeric_level = max(0, 3 + verbose - quiet)
    return levels[min(numeric_level, len(levels) - 1)]


def _sites(ctx: Any) -> tuple[Config, list[tuple[str, Site]]]:
    """Load the configuration and select the sites given with --site."""
    config = Config.load_or_default(ctx.obj["config_file"])
    return config, config.select_sites(ctx.obj["sites"])


@click.group()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/pycities/config.yaml)",
)
@click.option(
    "--site",
    "-s",
    "sites",
    multiple=True,
    help="Select a site (may be repeated; all sites if not given)",
)
@click.option(
    "--ignore-errors", "-i", is_flag=True, help="Ignore errors and continue"
)
@click.option("--verbose", "-v", count=True, help="More verbosity")
@click.option("--quiet", "-q", count=True, help="Less verbosity")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.version_option(package_name="pycities")
@click.pass_context
def main(
    ctx: Any,
    config_file: Optional[Path],
    sites: tuple[str, ...],
    ignore_errors: bool,
    verbose: int,
    quiet: int,
    json: bool,
) -> None:
    """pycities - deploy a local directory to your Neocities site(s)."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file or default_config_file()
    ctx.obj["sites"] = list(sites)
    ctx.obj["ignore_errors"] = ignore_errors
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet > 0)
    configure_logging(verbose, quiet)


def configure_logging(verbose: int, quiet: int) -> None:
    """Log pycities messages at the requested verbosity.

    Other libraries (httpx in particular) only get through at WARNING.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("pycities").setLevel(verbosity_level(verbose, quiet))


# =========================
# options shared by the commands
# =========================


def _extend_sites(ctx: Any, param: Any, value: tuple[str, ...]) -> None:
    ctx.obj["sites"].extend(value)


def _set_ignore_errors(ctx: Any, param: Any, value: bool) -> None:
    if value:
        ctx.obj["ignore_errors"] = True


def _add_verbosity(ctx: Any, param: Any, value: int) -> None:
    if not value:
        return
    ctx.obj[param.name] += value
    ctx.obj["out"].quiet = ctx.obj["quiet"] > 0
    configure_logging(ctx.obj["verbose"], ctx.obj["quiet"])


def global_options(f: Any) -> Any:
    """Also accept --site, --ignore-errors, -v and -q after the command name."""
    f = click.option(
        "--quiet",
        "-q",
        count=True,
        expose_value=False,
        callback=_add_verbosity,
        help="Less verbosity",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        count=True,
        expose_value=False,
        callback=_add_verbosity,
        help="More verbosity",
    )(f)
    f = click.option(
        "--ignore-errors",
        "-i",
        is_flag=True,
        expose_value=False,
        callback=_set_ignore_errors,
        help="Ignore errors and continue",
    )(f)
    f = click.option(
        "--site",
        "-s",
        multiple=True,
        expose_value=False,
        callback=_extend_sites,
        help="Select a site (may be repeated)",
    )(f)
    return f


# =========================
# config
# =========================


def _validate_non_empty(value: str) -> str:
    if not value.strip():
        raise click.BadParameter("Please enter a non-empty value.")
    return value


def _validate_proxy(value: str) -> str:
    if not value:
        return value
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise click.BadParameter(f"Invalid proxy URL: {e}") from e
    if url.scheme not in ("http", "https", "socks5") or not url.host:
        raise click.BadParameter("Invalid proxy URL")
    return value


def _login(username: str, password: str, proxy: Optional[str]) -> tuple[str, Site]:
    """Log in, trade the credentials for an API key and fetch the site name."""
    site = Site(auth=Auth(username=username, password=password), path="/", proxy=proxy)
    with site.build_client() as client:
        site.auth = Auth.from_key(client.key())
    with site.build_client() as client:
        name = client.info().sitename
    return name, site


@main.command()
@global_options
@click.pass_context
def config(ctx: Any) -> None:
    """Configure a site interactively.

    Logs in with your username and password, stores an API key instead of
    the password, and asks for the local directory of the site.
    """
    out: OutputFormatter = ctx.obj["out"]
    config_file: Path = ctx.obj["config_file"]
    out.info("Configuring sites interactively.")

    username = ""
    proxy = ""
    while True:
        username = click.prompt(
            "Username",
            default=username or None,
            value_proc=_validate_non_empty,
        )
        password = click.prompt("Password", hide_input=True)
        proxy = click.prompt(
            "Proxy (leave empty for none)",
            default=proxy,
            show_default=False,
            value_proc=_validate_proxy,
        )
        try:
            name, site = _login(username, password, proxy or None)
            break
        except NeocitiesError as e:
            logger.debug("Login failed: %s", e)
            out.error("Login failed! Try again, or press ^C to abort.")

    name = click.prompt("Name", default=name, value_proc=_validate_non_empty)
    site.path = str(
        click.prompt(
            "Path",
            default=f"{Path.home()}/",
            type=click.Path(exists=True, file_okay=False),
        )
    )
    site.free_account = click.confirm("Free account?", default=True)

    try:
        site_config = Config.load_or_default(config_file)
    except (NeocitiesError, OSError) as e:
        logger.warning("Could not read %s, starting afresh: %s", config_file, e)
        site_config = Config()
    if site_config.has_site(name) and not click.confirm(
        "Site already exists. Replace it?", default=False
    ):
        return

    site_config.insert_site(name, site)
    try:
        site_config.save(config_file)
    except OSError as e:
        out.error(str(e))
        ctx.exit(1)
    out.success(f"Site {name} saved to {config_file}")


# =========================
# key
# =========================


@main.command()
@global_options
@click.pass_context
def key(ctx: Any) -> None:
    """Replace credentials with API keys in the config file."""
    out: OutputFormatter = ctx.obj["out"]
    ignore_errors: bool = ctx.obj["ignore_errors"]

    try:
        site_config, sites = _sites(ctx)
        sites = [(name, site) for name, site in sites if site.auth.is_credentials]
        if not sites:
            out.warning("No sites to get API keys for.")
            return

        for name, site in sites:
            out.info(f"Getting API key for site {name}")
            try:
                with site.build_client() as client:
                    api_key = client.key()
            except NeocitiesError as e:
                if not ignore_errors:
                    raise
                logger.error("%s", e)
                continue
            site_config.sites[name].auth = Auth.from_key(api_key)

        site_config.save(ctx.obj["config_file"])
    except (NeocitiesError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)


# =========================
# list
# =========================


@main.command(name="list")
@global_options
@click.pass_context
def list_files(ctx: Any) -> None:
    """List files on the site(s)."""
    out: OutputFormatter = ctx.obj["out"]
    ignore_errors: bool = ctx.obj["ignore_errors"]
    result: dict[str, list[dict]] = {}

    try:
        _, sites = _sites(ctx)
        for name, site in sites:
            out.info(f"Listing site {name}")
            try:
                with site.build_client() as client:
                    entries = remote_tree(client.list())
            except NeocitiesError as e:
                if not ignore_errors:
                    raise
                logger.error("%s", e)
                entries = []

            result[name] = []
            for entry in entries:
                if entry.info is not None:
                    size, path = out.format_size(entry.info.size), entry.path
                else:
                    size, path = "", f"{entry.path}/"
                out.print(f"{size:>10}  {path}")
                result[name].append(
                    {
                        "path": entry.path,
                        "is_directory": entry.is_dir,
                        "size": entry.info.size if entry.info else None,
                        "sha1_hash": entry.info.sha1_sum if entry.info else None,
                    }
                )
    except (NeocitiesError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(result)


# =========================
# info
# =========================


@main.command()
@global_options
@click.pass_context
def info(ctx: Any) -> None:
    """Show information about the site(s)."""
    out: OutputFormatter = ctx.obj["out"]
    ignore_errors: bool = ctx.obj["ignore_errors"]
    result = {}

    try:
        _, sites = _sites(ctx)
        for name, site in sites:
            try:
                with site.build_client() as client:
                    site_info = client.info()
            except NeocitiesError as e:
                if not ignore_errors:
                    raise
                logger.error("%s", e)
                continue

            result[name] = site_info.to_dict()
            out.print_summary(
                f"Site {name}",
                [
                    ("Site name", site_info.sitename),
                    ("Views", str(site_info.views)),
                    ("Hits", str(site_info.hits)),
                    ("Created", site_info.created_at),
                    ("Last updated", site_info.last_updated or "-"),
                    ("Domain", site_info.domain or "-"),
                    ("Tags", ", ".join(site_info.tags) or "-"),
                ],
            )
    except (NeocitiesError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(result)


# =========================
# deploy
# =========================


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be done without doing it"
)
@global_options
@click.pass_context
def deploy(ctx: Any, dry_run: bool) -> None:
    """Deploy local files to the site(s).

    Uploads new and changed files and deletes remote files that no longer
    exist locally. Sites are deployed one after another.
    """
    out: OutputFormatter = ctx.obj["out"]
    ignore_errors: bool = ctx.obj["ignore_errors"]

    try:
        _, sites = _sites(ctx)
        if not sites:
            out.warning("No sites to deploy")
            return

        for name, site in sites:
            logger.info("Deploying site: %s", name)
            out.info(f"Deploying site {name} from {site.path}")
            with site.build_client() as client:
                SyncEngine(client, out).deploy(
                    site.path,
                    free_account=bool(site.free_account),
                    ignore_errors=ignore_errors,
                    dry_run=dry_run,
                )
    except (NeocitiesError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)

    logger.info("Deployment complete")


if __name__ == "__main__":
    main()
