"""Batch-scoped logging."""

import logging
from collections.abc import MutableMapping
from typing import Any
from uuid import uuid4


class RunLogger(logging.LoggerAdapter):
    """Logger bound to one execution batch.

    Prefixes records with the batch's run id and decides how loud detail
    messages are: ``detail()`` logs at INFO when the batch is verbose and at
    DEBUG otherwise.

    Args:
        logger: Underlying logger.
        run_id: Identifier of the batch. Generated when omitted.
        verbose: Whether detail messages are promoted to INFO.
    """

    def __init__(
        self,
        logger: logging.Logger,
        run_id: str | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__(logger, {"run_id": run_id or uuid4().hex})
        self.verbose = verbose

    @property
    def run_id(self) -> str:
        return self.extra["run_id"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.run_id}] {msg}", kwargs

    def detail(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log a diagnostic message at the batch's detail level."""
        self.log(logging.INFO if self.verbose else logging.DEBUG, msg, *args, **kwargs)
