from __future__ import annotations

import typer

from gplay import __version__
from gplay.cli.context import build_console
from gplay.core.errors import ErrorCode
from gplay.core.result import Err
from gplay.output.console import ConsoleProtocol, Style
from gplay.output.errors import (
    config_error_exit_code,
    print_config_error,
    print_publish_error,
    publish_error_exit_code,
)
from gplay.services.publish.client import build_publisher, load_service_account_info
from gplay.services.publish.config import DeployInputs, load_config
from gplay.services.publish.outputs import FAILURE_REASON_KEY, export_output
from gplay.services.publish.service import PublishService

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Upload APKs or App Bundles to Google Play and assign them to a release track.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def _export_failure(reason: str, console: ConsoleProtocol) -> None:
    exported = export_output(FAILURE_REASON_KEY, reason)
    if isinstance(exported, Err):
        console.warning(f"failed to export {FAILURE_REASON_KEY}: {exported.error}")


def run_deploy(inputs: DeployInputs, console: ConsoleProtocol) -> int:
    """Run one deploy and return the process exit code."""
    loaded = load_config(inputs)
    if isinstance(loaded, Err):
        print_config_error(loaded.error, console)
        _export_failure(loaded.error.message, console)
        return config_error_exit_code(loaded.error)
    config = loaded.value

    for warning in config.warnings:
        console.warning(warning)

    console.header("Configs")
    for key, value in config.describe():
        console.print(f"- {key}: {value}", Style.DIM)

    console.header("Authenticating")
    info = load_service_account_info(config.key_uri)
    publisher = build_publisher(info.value) if not isinstance(info, Err) else info
    if isinstance(publisher, Err):
        print_publish_error(publisher.error, console)
        _export_failure(publisher.error.message, console)
        return publish_error_exit_code(publisher.error)
    console.success("Authenticated client created")

    service = PublishService(config=config, publisher=publisher.value, console=console)
    result = service.run()
    if isinstance(result, Err):
        print_publish_error(result.error, console)
        _export_failure(result.error.message, console)
        return publish_error_exit_code(result.error)

    summary = result.value
    codes = ", ".join(str(c) for c in summary.version_codes)
    if summary.committed:
        console.success(f"Published version codes {codes} to track '{config.track}'")
    else:
        console.success(f"Dry run finished for version codes {codes}, edit {summary.edit_id} not committed")
    return int(ErrorCode.OK)


@app.command()
def deploy(
    service_account_json_key_path: str = typer.Option(
        "",
        "--service-account-json-key-path",
        envvar="service_account_json_key_path",
        help="Service account JSON key: local path, file:// URI or http(s) URL.",
        show_default=False,
    ),
    package_name: str = typer.Option(
        "", "--package-name", envvar="package_name", help="Application id, e.g. com.example.app."
    ),
    app_path: str = typer.Option(
        "",
        "--app-path",
        envvar="app_path",
        help="APK or AAB path(s), separated by | or newlines. AABs win over APKs.",
    ),
    track: str = typer.Option(
        "", "--track", envvar="track", help="Release track: internal, alpha, beta, production or custom."
    ),
    expansionfile_path: str = typer.Option(
        "",
        "--expansionfile-path",
        envvar="expansionfile_path",
        help="Expansion files as main:<path> or patch:<path>, | separated, one per APK.",
    ),
    user_fraction: float | None = typer.Option(
        None,
        "--user-fraction",
        envvar="user_fraction",
        help="Staged rollout fraction (0 < f < 1); 0 or empty for a full rollout.",
    ),
    status: str = typer.Option(
        "", "--status", envvar="status", help="Release status: draft, inProgress, halted or completed."
    ),
    release_name: str = typer.Option("", "--release-name", envvar="release_name", help="Release name."),
    update_priority: int = typer.Option(
        0, "--update-priority", envvar="update_priority", help="In-app update priority (0-5)."
    ),
    whatsnews_dir: str = typer.Option(
        "",
        "--whatsnews-dir",
        envvar="whatsnews_dir",
        help="Directory with whatsnew-<locale> release note files.",
    ),
    mapping_file: str = typer.Option(
        "",
        "--mapping-file",
        envvar="mapping_file",
        help="Deobfuscation mapping file(s), | separated: one for all apps or one per app.",
    ),
    native_symbols_file: str = typer.Option(
        "",
        "--native-symbols-file",
        envvar="native_symbols_file",
        help="Native debug symbols zip(s), | separated: one for all apps or one per app.",
    ),
    untrack_blocking_versions: bool = typer.Option(
        False,
        "--untrack-blocking-versions",
        envvar="untrack_blocking_versions",
        help="Replace version codes that would shadow the uploaded ones.",
    ),
    changes_not_sent_for_review: bool = typer.Option(
        False,
        "--changes-not-sent-for-review",
        envvar="changes_not_sent_for_review",
        help="Commit without sending the changes for review.",
    ),
    retry_without_sending_to_review: bool = typer.Option(
        False,
        "--retry-without-sending-to-review",
        envvar="retry_without_sending_to_review",
        help="Retry the commit without review if automatic review submission is refused.",
    ),
    ack_bundle_installation_warning: bool = typer.Option(
        False,
        "--ack-bundle-installation-warning",
        envvar="ack_bundle_installation_warning",
        help="Acknowledge the large App Bundle installation warning.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="dry_run", help="Validate the edit instead of committing it."
    ),
    verbose_log: bool = typer.Option(False, "--verbose", envvar="verbose_log", help="Print debug logs."),
    apk_path: str = typer.Option(
        "", "--apk-path", envvar="apk_path", hidden=True, help="Deprecated, use --app-path."
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Publish Android apps to Google Play."""
    del version
    inputs = DeployInputs(
        service_account_json_key_path=service_account_json_key_path,
        package_name=package_name,
        app_path=app_path,
        track=track,
        expansionfile_path=expansionfile_path,
        user_fraction=user_fraction,
        status=status,
        release_name=release_name,
        update_priority=update_priority,
        whatsnews_dir=whatsnews_dir,
        mapping_file=mapping_file,
        native_symbols_file=native_symbols_file,
        untrack_blocking_versions=untrack_blocking_versions,
        changes_not_sent_for_review=changes_not_sent_for_review,
        retry_without_sending_to_review=retry_without_sending_to_review,
        ack_bundle_installation_warning=ack_bundle_installation_warning,
        dry_run=dry_run,
        verbose_log=verbose_log,
        apk_path=apk_path,
    )
    console = build_console(verbose=verbose_log)
    code = run_deploy(inputs, console)
    if code != int(ErrorCode.OK):
        raise typer.Exit(code=code)


def main() -> None:
    app()
