"""
Suite Runner
Reads a test file, runs it and writes the reports
"""

from typing import Callable, Iterable, Optional

from api.base_client import HttpClient
from api.config import RunSettings
from base.logger import Logger
from models.types import RunReport
from test_engine.auth import AuthTokenManager
from test_engine.context import CancellationToken, ExecutionContext
from test_engine.events import EventEmitter, EventListener
from test_engine.excel_reader import ExcelReader
from test_engine.executor import CaseExecutor
from test_engine.orchestrator import SuiteOrchestrator
from test_engine.placeholders import PlaceholderResolver, prompt_operator
from test_engine.reporter import Reporter
from test_engine.sandbox import PythonScriptSandbox


class SuiteRunner:
    """
    Wires the engine together for one run
    """

    def __init__(
        self,
        settings: RunSettings,
        cancel_token: Optional[CancellationToken] = None,
        transport=None,
        prompt: Callable[[str], str] = prompt_operator,
        listeners: Optional[Iterable[EventListener]] = None
    ):
        """
        Initialize the runner

        Args:
            settings: Run settings (test file, row window, groups, ...)
            cancel_token: Token set by signal handlers to stop the run
            transport: HTTP transport (an HttpClient built from settings if omitted)
            prompt: Callable answering {{input:NAME}} placeholders
            listeners: Callables receiving the lifecycle events of the run
        """
        self.settings = settings
        self.cancel_token = cancel_token or CancellationToken()
        self.transport = transport or HttpClient(timeout=settings.timeout, verify_ssl=settings.verify_ssl)
        self.prompt = prompt
        self.events = EventEmitter(listeners)
        self.reporter = Reporter(settings.report_dir)
        self.logger = Logger()

    def build_orchestrator(self) -> SuiteOrchestrator:
        executor = CaseExecutor(
            transport=self.transport,
            resolver=PlaceholderResolver(prompt=self.prompt),
            sandbox=PythonScriptSandbox(),
            auth=AuthTokenManager(self.settings.token_path, self.settings.token_variable),
            cancel_token=self.cancel_token,
            events=self.events,
        )
        return SuiteOrchestrator(executor, self.cancel_token)

    def run(self, context: Optional[ExecutionContext] = None) -> RunReport:
        """
        Run the configured test file

        Returns:
            RunReport of the run

        Raises:
            TestDefinitionError: If the test file is malformed
        """
        settings = self.settings
        self.logger.info(f"Starting test execution from file: {settings.test_file}")

        reader = ExcelReader(
            settings.test_file,
            worksheet=settings.worksheet,
            start_row=settings.start_row,
            end_row=settings.end_row,
            base_url=settings.base_url,
        )
        plan = reader.read_test_plan()

        if settings.groups:
            self.logger.info(f"Selected groups: {', '.join(settings.groups)}")

        report = self.build_orchestrator().run(plan, settings.groups, context)

        self.logger.info("Generating test reports...")
        self.reporter.generate_report(report, source=settings.test_file)
        self.reporter.print_summary(report)

        return report
