import logging
import os
from datetime import datetime
from reportportal_client import RPLogHandler


class Logger:
    _instance = None
    _initialized = False
    _rp_handler = None
    _error_logs = []

    # Default log levels
    DEFAULT_FILE_LEVEL = "DEBUG"
    DEFAULT_CONSOLE_LEVEL = "INFO"

    LOGGER_NAME = "ApiSheetRunner"

    # Map string levels to logging constants
    LOG_LEVELS = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL
    }

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_path=None, file_level=None, console_level=None):
        if not Logger._initialized:
            Logger._error_logs = []

            self.log_dir = log_path if log_path else 'logs'
            os.makedirs(self.log_dir, exist_ok=True)

            # One log file per run
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = os.path.join(self.log_dir, f'test_run_{timestamp}.log')

            self.logger = logging.getLogger(self.LOGGER_NAME)
            self.logger.propagate = False
            self.logger.setLevel(logging.DEBUG)
            self.logger.handlers.clear()

            file_log_level = self.LOG_LEVELS.get(
                (file_level or self.DEFAULT_FILE_LEVEL).upper(),
                self.LOG_LEVELS[self.DEFAULT_FILE_LEVEL]
            )
            console_log_level = self.LOG_LEVELS.get(
                (console_level or self.DEFAULT_CONSOLE_LEVEL).upper(),
                self.LOG_LEVELS[self.DEFAULT_CONSOLE_LEVEL]
            )

            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(file_log_level)

            console_handler = logging.StreamHandler()
            console_handler.setLevel(console_log_level)

            formatter = logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(formatter)
            console_handler.setFormatter(formatter)

            self.logger.addHandler(file_handler)
            self.logger.addHandler(console_handler)

            # ReportPortal handler is a no-op unless a launch is active
            try:
                rp_handler = RPLogHandler()
                rp_handler.setLevel(logging.DEBUG)
                self.logger.addHandler(rp_handler)
                Logger._rp_handler = rp_handler
            except Exception as e:
                self.logger.warning(f"Failed to initialize ReportPortal handler: {str(e)}")
                Logger._rp_handler = None

            Logger._initialized = True

    @classmethod
    def get_instance(cls, log_path=None, file_level=None, console_level=None):
        if cls._instance is None or not cls._initialized:
            cls._instance = Logger(log_path, file_level, console_level)
        return cls._instance

    @classmethod
    def _log_with_attachment(cls, level, message, attachment=None):
        """Internal method to handle logging with optional attachment"""
        instance = cls.get_instance()

        if attachment and cls._rp_handler:
            instance.logger.log(level, message, extra={"attachment": attachment})
        else:
            instance.logger.log(level, message)

    @classmethod
    def debug(cls, message, attachment=None):
        """
        Log debug level message

        Args:
            message: The message to log
            attachment: Optional attachment to include with the log
        """
        cls._log_with_attachment(logging.DEBUG, message, attachment)

    @classmethod
    def info(cls, message, attachment=None):
        """
        Log info level message

        Args:
            message: The message to log
            attachment: Optional attachment to include with the log
        """
        cls._log_with_attachment(logging.INFO, message, attachment)

    @classmethod
    def warning(cls, message, attachment=None):
        """Log warning level message"""
        cls._log_with_attachment(logging.WARNING, message, attachment)

    @classmethod
    def error(cls, message, attachment=None):
        """Log error level message"""
        cls._error_logs.append(message)
        cls._log_with_attachment(logging.ERROR, message, attachment)

    @classmethod
    def critical(cls, message, attachment=None):
        """Log critical level message"""
        cls._error_logs.append(message)
        cls._log_with_attachment(logging.CRITICAL, message, attachment)

    @classmethod
    def init_error_collection(cls):
        """Initialize or reset the error collection"""
        cls._error_logs = []

    @classmethod
    def get_errors(cls):
        """Return a copy of the error messages collected so far"""
        return list(cls._error_logs)

    @classmethod
    def get_error_summary(cls):
        """
        Return all collected error messages as a summary string.

        Returns:
            str: A formatted string containing all error messages
        """
        if not cls._error_logs:
            return "No errors collected during test execution"

        summary_lines = ["\n===== ERROR SUMMARY ====="]
        summary_lines.extend(str(error_msg) for error_msg in cls._error_logs)
        summary_lines.append("===== END ERROR SUMMARY =====")

        return "\n".join(summary_lines)
