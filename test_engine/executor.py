"""
Test Case Executor
Runs one test case to completion, one TestResult per repeat iteration
"""

import time
from typing import List, Optional

from base.logger import Logger
from models.test_plan import TestCase
from models.types import AuthType, ResultStatus, TestResult
from test_engine.auth import AuthTokenManager
from test_engine.context import ExecutionContext, CancellationToken, RequestSnapshot
from test_engine.errors import EngineError, ScriptError, TestDefinitionError
from test_engine.events import CaseBegin, CaseEnd, EventEmitter
from test_engine.placeholders import PlaceholderResolver
from test_engine.sandbox import (
    PRE_SCRIPT,
    POST_SCRIPT,
    PythonScriptSandbox,
    RequestView,
    ResponseView,
    ScriptBindings,
    ScriptSandbox,
)


MAX_BODY_IN_RESULT = 2000


class CaseExecutor:
    """
    Executes test cases against an HTTP transport

    Per iteration: delay, pre script, resolve templates, inject token,
    send, extract token, post script, record. An engine error aborts the
    current iteration only and becomes a non-passing result, except
    TestDefinitionError which ends the run.
    """

    def __init__(
        self,
        transport,
        resolver: Optional[PlaceholderResolver] = None,
        sandbox: Optional[ScriptSandbox] = None,
        auth: Optional[AuthTokenManager] = None,
        cancel_token: Optional[CancellationToken] = None,
        events: Optional[EventEmitter] = None
    ):
        """
        Initialize the executor

        Args:
            transport: Object with send(method, url, headers, body) returning a response
            resolver: Placeholder resolver (default one if omitted)
            sandbox: Script sandbox (PythonScriptSandbox if omitted)
            auth: Token manager (default token path and variable if omitted)
            cancel_token: Checked before every iteration and during delays
            events: Receives CaseBegin/CaseEnd for every iteration
        """
        self.transport = transport
        self.resolver = resolver or PlaceholderResolver()
        self.sandbox = sandbox or PythonScriptSandbox()
        self.auth = auth or AuthTokenManager()
        self.cancel_token = cancel_token or CancellationToken()
        self.events = events or EventEmitter()
        self.logger = Logger()

    def run(self, case: TestCase, context: ExecutionContext, group_name: str = '') -> List[TestResult]:
        """
        Run every iteration of a test case

        Args:
            case: Test case to run
            context: Execution context shared by the whole run
            group_name: Group the case belongs to, for results

        Returns:
            List of TestResult, one per iteration that started

        Raises:
            TestDefinitionError: If the case cannot be executed as defined
        """
        results = []
        repeat_count = case.config.repeat_count

        self.logger.info(f"Running {case.label}")
        for iteration in range(1, repeat_count + 1):
            if self.cancel_token.is_cancelled:
                break

            if case.config.delay > 0:
                self.logger.debug(f"Waiting {case.config.delay}ms before iteration {iteration}")
                if self.cancel_token.wait(case.config.delay / 1000.0):
                    break

            self.events.emit(CaseBegin(case, group_name, iteration))
            result = self._run_iteration(case, context, group_name, iteration)
            results.append(result)
            self.events.emit(CaseEnd(case, group_name, iteration, result))

            suffix = f" [{iteration}/{repeat_count}]" if repeat_count > 1 else ''
            if result.passed:
                self.logger.info(f"✓ {case.label} passed{suffix}")
            else:
                self.logger.error(f"✗ {case.label} {result.status.value}{suffix}: {result.message}")

        return results

    def _run_iteration(
        self,
        case: TestCase,
        context: ExecutionContext,
        group_name: str,
        iteration: int
    ) -> TestResult:
        start = time.perf_counter()
        request: Optional[RequestSnapshot] = None
        response = None

        try:
            if case.pre_script:
                template = RequestSnapshot(case.method, case.url, dict(case.headers), case.body)
                bindings = ScriptBindings(
                    variables=context.variables,
                    request=RequestView.from_snapshot(template),
                    label=case.label,
                )
                self.sandbox.run(case.pre_script, bindings, PRE_SCRIPT)

            request = self.resolver.resolve_request(case, context.variables)

            if case.auth_type == AuthType.AUTHORIZED:
                request.headers = self.auth.inject(case, request.headers, context.variables)

            context.last_request = request
            response = self.transport.send(request.method, request.url, request.headers, request.body)
            context.last_response = response

            if case.auth_type == AuthType.AUTHORIZER:
                self.auth.extract(case, response, context.variables)

            if case.post_script:
                bindings = ScriptBindings(
                    variables=context.variables,
                    request=RequestView.from_snapshot(request),
                    response=ResponseView.from_response(response),
                    label=case.label,
                )
                self.sandbox.run(case.post_script, bindings, POST_SCRIPT)

        except TestDefinitionError:
            raise
        except EngineError as e:
            failed_check = isinstance(e, ScriptError) and e.assertion
            status = ResultStatus.FAILED if failed_check else ResultStatus.ERROR
            return self._result(case, group_name, iteration, status, start, request, response, e)

        return self._result(case, group_name, iteration, ResultStatus.PASSED, start, request, response)

    @staticmethod
    def _result(
        case: TestCase,
        group_name: str,
        iteration: int,
        status: ResultStatus,
        start: float,
        request: Optional[RequestSnapshot],
        response,
        error: Optional[EngineError] = None
    ) -> TestResult:
        body = None
        if response is not None and response.text is not None:
            body = response.text[:MAX_BODY_IN_RESULT]

        return TestResult(
            case_id=case.id,
            case_name=case.name,
            group=group_name,
            iteration=iteration,
            status=status,
            error_kind=error.kind if error else None,
            message=error.message if error else None,
            method=case.method,
            url=request.url if request else case.url,
            status_code=response.status_code if response is not None else None,
            response_body=body,
            duration=time.perf_counter() - start,
        )
