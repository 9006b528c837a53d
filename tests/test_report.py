import io

from rpccompat.checker.report import (
    GREEN,
    RED,
    CheckOutcome,
    CheckStatus,
    CompatibilityReport,
    colorize_status_label,
)


class TtyStream(io.StringIO):
    def isatty(self):
        return True


def sample_report():
    return CompatibilityReport(
        checks=[
            CheckOutcome("health", CheckStatus.PASSED, "result='ok'"),
            CheckOutcome("slot", CheckStatus.FAILED, "result must be greater than 0"),
            CheckOutcome("supply", CheckStatus.SKIPPED, "skipped because getHealth did not return ok"),
        ]
    )


def test_has_failures_detects_failed_check():
    assert sample_report().has_failures() is True


def test_has_no_failures_without_failed_checks():
    report = CompatibilityReport(
        checks=[
            CheckOutcome("health", CheckStatus.PASSED, "ok"),
            CheckOutcome("slot", CheckStatus.SKIPPED, "skipped"),
        ]
    )
    assert report.has_failures() is False


def test_counts_cover_every_status():
    report = sample_report()
    totals = report.counts()
    assert set(totals) == set(CheckStatus)
    assert sum(totals.values()) == len(report.checks)
    assert totals[CheckStatus.FAILED] == 1


def test_empty_report_counts_are_zero():
    assert CompatibilityReport().counts() == dict.fromkeys(CheckStatus, 0)


def test_print_summary_lines():
    stream = io.StringIO()
    report = sample_report()
    report.print_summary(stream)
    lines = stream.getvalue().splitlines()
    assert lines[0] == "[PASS] health - result='ok'"
    assert lines[1] == "[FAIL] slot - result must be greater than 0"
    assert lines[2] == "[SKIP] supply - skipped because getHealth did not return ok"
    assert lines[3] == ""
    assert lines[4] == "Summary: 1 passed, 1 failed, 1 skipped"


def test_colorize_plain_when_not_terminal():
    assert colorize_status_label("PASS", GREEN, io.StringIO()) == "PASS"


def test_colorize_on_terminal(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert colorize_status_label("FAIL", RED, TtyStream()) == "\x1b[31mFAIL\x1b[0m"


def test_colorize_respects_no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    assert colorize_status_label("PASS", GREEN, TtyStream()) == "PASS"