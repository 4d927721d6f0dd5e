"""Rotation Context Management.

Context variables binding the secret id, rotation step, and attempt
token of the running invocation to every log entry.
"""

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


_secret_id_var: ContextVar[str] = ContextVar("secret_id", default="")
_step_var: ContextVar[str] = ContextVar("step", default="")
_token_var: ContextVar[str] = ContextVar("token", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    secret_id = _secret_id_var.get()
    if secret_id:
        ctx["secret_id"] = secret_id
    step = _step_var.get()
    if step:
        ctx["step"] = step
    token = _token_var.get()
    if token:
        ctx["token"] = token
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


@dataclass
class RotationContext:
    """Context manager for invocation-scoped logging context.

    Binds secret_id, step, and token to all log entries within the
    context. Restores the previous values on exit.

    Example:
        with RotationContext(secret_id="db/app", step="setSecret", token="t1"):
            logger.info("activating pending credential")
    """

    secret_id: str = ""
    step: str = ""
    token: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _tokens: list = field(default_factory=list, repr=False)

    def __enter__(self) -> "RotationContext":
        self._tokens = [
            (_secret_id_var, _secret_id_var.set(self.secret_id)),
            (_step_var, _step_var.set(self.step)),
            (_token_var, _token_var.set(self.token)),
            (_extra_context_var, _extra_context_var.set(self.extra.copy())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, reset_token in reversed(self._tokens):
            var.reset(reset_token)
        self._tokens.clear()

