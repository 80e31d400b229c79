"""
Reporter
Generates run reports in JSON and text format
"""

import json
from typing import Dict, Optional
from pathlib import Path
from datetime import datetime
from base.logger import Logger
from models.types import RunReport, ResultStatus


STATUS_LABELS = {
    ResultStatus.PASSED: ("✓", "PASS"),
    ResultStatus.FAILED: ("✗", "FAIL"),
    ResultStatus.ERROR: ("!", "ERROR"),
}


class Reporter:
    """
    Generate test execution reports
    """

    def __init__(self, output_dir: str = "test_results"):
        """
        Initialize reporter

        Args:
            output_dir: Directory to save reports
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = Logger()

    def generate_report(self, report: RunReport, source: Optional[str] = None) -> Dict[str, str]:
        """
        Generate test report in JSON and text formats

        Args:
            report: Results and summary of the run
            source: Test file the plan was read from

        Returns:
            Dictionary with paths to generated reports
        """
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')

        json_path = self.output_dir / f'test_report_{timestamp}.json'
        self._generate_json_report(report, json_path, source)

        text_path = self.output_dir / f'test_report_{timestamp}.txt'
        self._generate_text_report(report, text_path, source)

        self.logger.info("Reports generated:")
        self.logger.info(f"  JSON: {json_path}")
        self.logger.info(f"  Text: {text_path}")

        return {
            'json': str(json_path),
            'text': str(text_path)
        }

    def _generate_json_report(self, report: RunReport, output_path: Path, source: Optional[str]):
        data = {
            'generated_at': datetime.now().isoformat(),
            'source': source,
        }
        data.update(report.to_dict())

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _generate_text_report(self, report: RunReport, output_path: Path, source: Optional[str]):
        summary = report.summary

        lines = []
        lines.append("=" * 80)
        lines.append("API TEST RUN REPORT")
        lines.append("=" * 80)
        lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        if source:
            lines.append(f"Source:    {source}")
        lines.append("")

        lines.append("SUMMARY")
        lines.append("-" * 80)
        lines.append(f"Test Cases:   {summary.total_cases}")
        lines.append(f"Iterations:   {summary.total_iterations}")
        lines.append(f"Passed:       {summary.passed} ({summary.pass_rate:.1f}%)")
        lines.append(f"Failed:       {summary.failed}")
        lines.append(f"Errored:      {summary.errored}")
        lines.append(f"Duration:     {summary.duration:.2f}s")
        lines.append(f"Status:       {'CANCELLED (partial results)' if summary.cancelled else 'COMPLETED'}")
        lines.append("")

        if report.groups:
            lines.append("GROUPS")
            lines.append("-" * 80)
            for group in report.groups:
                lines.append(
                    f"{group.name or '(default)'}: Total: {group.total_cases}, Passed: {group.passed}, "
                    f"Failed: {group.failed}, Errored: {group.errored}"
                )
            lines.append("")

        lines.append("TEST LIST")
        lines.append("-" * 80)
        for result in report.results:
            symbol, text = STATUS_LABELS[result.status]
            lines.append(
                f"{symbol} {result.case_id} [{result.iteration}] - {text} - {result.case_name}"
            )
        lines.append("")

        failures = report.failed_results()
        if failures:
            lines.append("FAILURES")
            lines.append("-" * 80)
            for result in failures:
                lines.append(f"{result.case_id} [{result.iteration}] {result.case_name}")
                lines.append(f"   Request:  {result.method} {result.url}")
                if result.status_code is not None:
                    lines.append(f"   Status:   {result.status_code}")
                if result.error_kind:
                    lines.append(f"   Kind:     {result.error_kind.value}")
                lines.append(f"   Message:  {result.message}")
                if result.response_body:
                    lines.append(f"   Response: {result.response_body[:500]}")
                lines.append("")

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(lines))

    def print_summary(self, report: RunReport):
        """
        Print test summary to console

        Args:
            report: Results and summary of the run
        """
        summary = report.summary

        print("\n" + "=" * 80)
        print("TEST EXECUTION SUMMARY")
        print("=" * 80)
        print(f"Test Cases:   {summary.total_cases}")
        print(f"Iterations:   {summary.total_iterations}")
        print(f"Passed:       {summary.passed} ({summary.pass_rate:.1f}%)")
        print(f"Failed:       {summary.failed}")
        print(f"Errored:      {summary.errored}")
        print(f"Duration:     {summary.duration:.2f}s")
        if summary.cancelled:
            print("Status:       CANCELLED (partial results)")
        print("=" * 80 + "\n")

        for result in report.results:
            symbol, text = STATUS_LABELS[result.status]
            print(f"{symbol} {text} - {result.case_id} [{result.iteration}]: {result.case_name}")
            if not result.passed:
                print(f"       {result.message}")

        errors = Logger.get_errors()
        if errors:
            print("\n" + Logger.get_error_summary())
