"""
运行报告测试
"""

from core.enums import ReportStatus
from graph import GraphBuilder
from scheduler import RunReport


def _graph():
    graph = GraphBuilder().build_from_text(
        "a:\n\techo a\n"
        "b: a\n\techo b\n"
        "c:\n\techo c\n"
        "d: c\n\techo d\n"
    )
    graph.get("a").try_start()
    graph.get("a").mark_failed()
    graph.get("c").try_start()
    return graph


class TestRunReport:
    def test_blocked_and_incomplete_are_distinguished(self):
        report = RunReport.from_graph(_graph(), elapsed=1.5, incomplete_reason="timeout")

        assert report.get("a").status == ReportStatus.FAILED
        assert report.get("b").status == ReportStatus.BLOCKED
        assert report.get("b").blocked_by == ("a",)
        assert report.get("c").status == ReportStatus.INCOMPLETE
        assert report.get("d").status == ReportStatus.INCOMPLETE
        assert not report.succeeded

    def test_counts(self):
        report = RunReport.from_graph(_graph(), incomplete_reason="interrupted")
        counts = report.counts()

        assert counts[ReportStatus.FAILED] == 1
        assert counts[ReportStatus.BLOCKED] == 1
        assert counts[ReportStatus.INCOMPLETE] == 2
        assert counts[ReportStatus.FINISHED] == 0
        assert report.get("missing") is None

    def test_log_lists_every_task(self, log_messages):
        RunReport.from_graph(_graph(), incomplete_reason="timeout").log()

        assert any("b: BLOCKED (blocked by: a)" in m for m in log_messages)
        assert any("Run incomplete: timeout" in m for m in log_messages)
        assert any(m.startswith("📊 Run report: 0/4 FINISHED") for m in log_messages)
