"""
Rich console reporter.

Prints one coloured line per event using the Rich library. Failures and hook
errors are followed by a dimmed one-line description of the exception.
"""

import rich.console as _rich_console
import rich.markup as _rich_markup

import jestify.core.suite as suite_module
import jestify.reporting.base as base


class RichReporter(base.Reporter):
    """Reporter with colored console output."""

    def __init__(
        self,
        console: _rich_console.Console | None = None,
        *,
        no_color: bool = False,
    ) -> None:
        """
        Initialize the Rich reporter.

        Args:
            console: Rich Console instance (created if not provided).
            no_color: Disable all colors.
        """
        self._console = console or _rich_console.Console(no_color=no_color)

    @property
    def console(self) -> _rich_console.Console:
        """Console the reporter prints to."""
        return self._console

    def on_suite_start(self, title: str) -> None:
        self._console.print(f"[bold]{_escape(title)}[/bold]")

    def on_test_success(self, title: str, elapsed_ms: float) -> None:
        self._console.print(
            f"  [green]✔[/green] {_escape(title)} [dim]({elapsed_ms:.0f} ms)[/dim]"
        )

    def on_test_timeout(self, title: str, timeout_ms: int) -> None:
        self._console.print(
            f"  [yellow]⚠ {_escape(title)}[/yellow] [dim](timed out after {timeout_ms} ms)[/dim]"
        )

    def on_test_cancelled(self, title: str, elapsed_ms: float) -> None:
        self._console.print(
            f"  [yellow]⚠ {_escape(title)}[/yellow] [dim](cancelled after {elapsed_ms:.0f} ms)[/dim]"
        )

    def on_test_failure(
        self,
        title: str,
        elapsed_ms: float,
        error: BaseException,
    ) -> None:
        self._console.print(
            f"  [red]✘ {_escape(title)}[/red] [dim](failed after {elapsed_ms:.0f} ms)[/dim]"
        )
        self._console.print(f"    [dim]{_describe(error)}[/dim]")

    def on_test_skipped(self, title: str, reason: str | None = None) -> None:
        suffix = f" ({_escape(reason)})" if reason else ""
        self._console.print(f"  [cyan]⏭ {_escape(title)}[/cyan][dim]{suffix}[/dim]")

    def on_hook_error(
        self,
        hook_kind: suite_module.HookKind,
        scope_title: str,
        error: BaseException,
    ) -> None:
        self._console.print(
            f"  [red]✘ {hook_kind.label} hook failed in {_escape(scope_title)}[/red]"
        )
        self._console.print(f"    [dim]{_describe(error)}[/dim]")


def _escape(text: str) -> str:
    return _rich_markup.escape(text)


def _describe(error: BaseException) -> str:
    return _escape(f"{type(error).__name__}: {error}")
