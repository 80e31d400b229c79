"""
Suite Orchestrator
Runs the selected groups of a test plan in order and aggregates results
"""

import time
from typing import Iterable, List, Optional

from base.logger import Logger
from models.test_plan import Group, TestPlan
from models.types import GroupStats, ResultStatus, RunReport, RunSummary
from test_engine.context import ExecutionContext, CancellationToken
from test_engine.errors import TestDefinitionError
from test_engine.events import GroupBegin, GroupEnd, SuiteBegin, SuiteEnd
from test_engine.executor import CaseExecutor


class SuiteOrchestrator:
    """
    Sequential scheduler for a test plan

    Groups run in plan order and cases in definition order, one at a time,
    against one ExecutionContext for the whole run. Nothing is reordered:
    later cases may read variables written by earlier ones.

    Suite and group lifecycle events go to the executor's emitter, so one
    subscription sees the whole stream.
    """

    def __init__(self, executor: CaseExecutor, cancel_token: Optional[CancellationToken] = None):
        self.executor = executor
        self.cancel_token = cancel_token or executor.cancel_token
        self.events = executor.events
        self.logger = Logger()

    @staticmethod
    def select_groups(plan: TestPlan, selection: Optional[Iterable[str]] = None) -> List[Group]:
        """
        Groups to run, in plan order

        Without a selection every group runs, the unnamed default group
        included. With one, only named groups in the selection run.
        """
        if selection is None:
            return list(plan.groups)
        wanted = set(selection)
        if not wanted:
            return list(plan.groups)
        return [g for g in plan.groups if not g.is_default and g.name in wanted]

    def run(
        self,
        plan: TestPlan,
        groups: Optional[Iterable[str]] = None,
        context: Optional[ExecutionContext] = None
    ) -> RunReport:
        """
        Run a test plan

        Args:
            plan: Parsed test plan
            groups: Names of the groups to run (None runs all)
            context: Execution context (a fresh one if omitted)

        Returns:
            RunReport with results in execution order

        Raises:
            TestDefinitionError: A case could not be executed as defined
        """
        context = context or ExecutionContext()
        selected = self.select_groups(plan, groups)
        report = RunReport()
        summary = report.summary
        run_start = time.perf_counter()

        if groups is not None:
            missing = set(groups) - {g.name for g in selected}
            if missing:
                self.logger.warning(f"Groups not found in test plan: {', '.join(sorted(missing))}")

        self.logger.info(
            f"Running {sum(len(g.cases) for g in selected)} test case(s) in {len(selected)} group(s)"
        )

        self.events.emit(SuiteBegin(plan.name, [g.name for g in selected]))

        try:
            for group in selected:
                if self.cancel_token.is_cancelled:
                    break
                report.groups.append(self._run_group(group, context, report))
        except TestDefinitionError as e:
            self.logger.critical(f"Test definition error, aborting run: {e.message}")
            raise
        finally:
            summary.duration = time.perf_counter() - run_start

        if self.cancel_token.is_cancelled:
            summary.cancelled = True
            self.logger.warning(
                f"Run cancelled: {summary.total_iterations} iteration(s) completed before cancellation"
            )

        self.events.emit(SuiteEnd(plan.name, summary.duration, summary))

        self.logger.info(
            f"Run finished: {summary.passed} passed, {summary.failed} failed, "
            f"{summary.errored} errored in {summary.duration:.2f}s"
        )
        return report

    def _run_group(self, group: Group, context: ExecutionContext, report: RunReport) -> GroupStats:
        stats = GroupStats(name=group.name)
        summary = report.summary
        group_start = time.perf_counter()

        self.logger.info("=" * 60)
        self.logger.info(f"Group: {group.name or '(default)'} ({len(group.cases)} case(s))")
        self.logger.info("=" * 60)
        self.events.emit(GroupBegin(group.name, len(group.cases)))

        for case in group.cases:
            if self.cancel_token.is_cancelled:
                break

            results = self.executor.run(case, context, group.name)
            if results:
                stats.total_cases += 1
                summary.total_cases += 1

            for result in results:
                report.results.append(result)
                stats.record(result)
                summary.total_iterations += 1
                if result.status == ResultStatus.PASSED:
                    summary.passed += 1
                elif result.status == ResultStatus.FAILED:
                    summary.failed += 1
                else:
                    summary.errored += 1

        stats.duration = time.perf_counter() - group_start
        self.logger.info(
            f"Group '{group.name or '(default)'}': Total: {stats.total_cases}, "
            f"Passed: {stats.passed}, Failed: {stats.failed}, Errored: {stats.errored}"
        )
        self.events.emit(GroupEnd(group.name, stats.duration, stats))
        return stats
