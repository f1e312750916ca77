"""Unit tests for console output."""

from fwapi.core.exceptions import SubsystemError
from fwapi.core.output import Console, Verbosity


def make_console(verbosity: int) -> Console:
    console = Console()
    console.configure(verbosity=verbosity, no_color=True)
    return console


class TestVerbosity:
    """Tests for verbosity filtering."""

    def test_clamped(self):
        assert make_console(-3).verbosity == Verbosity.QUIET
        assert make_console(9).verbosity == Verbosity.DEBUG

    def test_quiet_hides_info_but_not_errors(self, capsys):
        console = make_console(Verbosity.QUIET)
        console.info("listening")
        console.step("Listing chains")
        console.error("iptables failed")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[ERROR] iptables failed" in captured.err

    def test_debug_shows_command_lines(self, capsys):
        console = make_console(Verbosity.DEBUG)
        console.debug("Running: iptables -w -t filter -S")
        assert "[DEBUG] Running: iptables -w -t filter -S" in capsys.readouterr().out

    def test_normal_hides_debug(self, capsys):
        console = make_console(Verbosity.NORMAL)
        console.debug("Running: iptables -S")
        console.verbose("details")
        assert capsys.readouterr().out == ""


class TestReport:
    """Tests for error reports."""

    def test_report_includes_details_and_hint(self, capsys):
        console = make_console(Verbosity.QUIET)
        console.report(SubsystemError(
            "Command failed: -X WEB",
            return_code=1,
            stderr="iptables: Directory not empty.\n",
            hint="Flush the chain first",
        ))
        err = capsys.readouterr().err
        assert "[ERROR] Command failed: -X WEB" in err
        assert "Exit code: 1" in err
        assert "Error output: iptables: Directory not empty." in err
        assert "Hint: Flush the chain first" in err
