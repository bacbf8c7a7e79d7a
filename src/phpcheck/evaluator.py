from __future__ import annotations

import logging

from .checkers import ExternalProcessChecker, SelfHostedChecker, SyntaxChecker
from .config import CheckerConfig, load_config
from .errors import CheckerUnavailable, ErrorKind, normalize
from .namespaces import validate_declarations
from .source import check_open_tag, check_trailing_buffer, strip_comments
from .tokens import token_test_report

LOGGER = logging.getLogger(__name__)


class Evaluator:
    """Runs the check stages in order; the first failing stage wins."""

    def __init__(
        self,
        config: CheckerConfig | None = None,
        external: SyntaxChecker | None = None,
        fallback: SyntaxChecker | None = None,
    ) -> None:
        self.config = config or CheckerConfig()
        if external is None and self.config.external_enabled:
            external = ExternalProcessChecker.from_config(self.config)
        self.external = external
        self.fallback = fallback or SelfHostedChecker()

    def check(self, content: str, file: str | None = None) -> bool:
        check_open_tag(content, file)

        report = token_test_report(content)
        if report is not None:
            raise normalize(ErrorKind.COMPILE_ERROR, report.message, file, report.line)

        stripped = strip_comments(content)
        check_trailing_buffer(content, stripped, file)

        confirmed = False
        if self.external is not None:
            try:
                confirmed = self.external.check(stripped, file)
            except CheckerUnavailable as exc:
                LOGGER.debug("external checker unavailable, using fallback: %s", exc)

        validate_declarations(stripped, content, file)

        if not confirmed:
            self.fallback.check(content, file)
        return True


def check(content: str, file: str | None = None) -> bool:
    """Validate ``content`` with the environment's configuration."""
    return Evaluator(load_config()).check(content, file)
