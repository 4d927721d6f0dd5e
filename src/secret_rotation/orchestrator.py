"""Rotation Orchestrator.

Processes exactly one step of one rotation attempt per call:

    createSecret  stage a new PENDING version for the token
    setSecret     activate the PENDING credential in the backing system
    testSecret    prove the PENDING credential works
    finishSecret  move CURRENT to the token and clear PENDING

The only failures turned into success are the two re-delivery
short-circuits: PENDING already staged for the token in createSecret,
and CURRENT already on the token in finishSecret. A secret without a
CURRENT version cannot be routed to any strategy and is reported as a
StrategyResolutionError. Everything else is logged with the step and
secret id and re-raised unchanged.
"""

import logging
from typing import Optional, Tuple

from src.logging_config import PerformanceTimer, RotationContext
from src.rotation_errors import (
    InvalidPayloadError,
    RotationError,
    SecretNotFoundError,
    StrategyResolutionError,
    UnknownStepError,
)
from src.secret_rotation.config import RotationConfig, RotationStep, StepOutcome
from src.secret_rotation.models import RotationRequest, StepResult
from src.secret_rotation.selector import StrategySelector
from src.secret_rotation.strategies import RotationStrategy
from src.secrets_vault import SecretVersion, StageLabel, VersionedSecretStore

logger = logging.getLogger(__name__)


class RotationOrchestrator:
    """State machine driving a secret through the four rotation steps."""

    def __init__(
        self,
        store: VersionedSecretStore,
        selector: Optional[StrategySelector] = None,
        config: Optional[RotationConfig] = None,
    ):
        self.store = store
        self.selector = selector or StrategySelector(store, config)

    def handle(self, request: RotationRequest) -> StepResult:
        return self.rotate(request.step, request.secret_id, request.token)

    def rotate(self, step: str, secret_id: str, token: str) -> StepResult:
        """Run one step for (secret_id, token)."""
        with RotationContext(secret_id=secret_id, step=step, token=token):
            try:
                rotation_step = RotationStep(step)
            except ValueError:
                logger.error("Unknown rotation step %r for %s", step, secret_id)
                raise UnknownStepError(step, secret_id=secret_id) from None

            logger.info("Starting %s for %s", step, secret_id)
            try:
                with PerformanceTimer(step) as timer:
                    outcome, strategy = self._dispatch(rotation_step, secret_id, token)
            except RotationError as exc:
                if exc.secret_id is None:
                    exc.secret_id = secret_id
                if exc.step is None:
                    exc.step = step
                logger.error(
                    "%s failed for %s: %s", step, secret_id, exc.message,
                    extra={"error_code": exc.error_code.value},
                )
                raise
            except Exception:
                logger.exception("%s failed for %s", step, secret_id)
                raise

            result = StepResult(
                step=step,
                secret_id=secret_id,
                token=token,
                outcome=outcome,
                strategy=strategy.name if strategy else "",
                duration_seconds=round(timer.duration_ms / 1000, 4),
            )
            logger.info(
                "Finished %s for %s", step, secret_id,
                extra={"outcome": outcome.value, "strategy": result.strategy},
            )
            return result

    # ── Steps ─────────────────────────────────────────────────────────

    def _dispatch(
        self, step: RotationStep, secret_id: str, token: str
    ) -> Tuple[StepOutcome, Optional[RotationStrategy]]:
        if step is RotationStep.CREATE_SECRET:
            return self.create_secret(secret_id, token)
        if step is RotationStep.SET_SECRET:
            return self.set_secret(secret_id, token)
        if step is RotationStep.TEST_SECRET:
            return self.test_secret(secret_id, token)
        return self.finish_secret(secret_id, token)

    def create_secret(self, secret_id: str, token: str) -> Tuple[StepOutcome, Optional[RotationStrategy]]:
        if self._pending_exists(secret_id, token):
            logger.info("%s already staged for version %s", StageLabel.PENDING.value, token)
            return StepOutcome.ALREADY_PENDING, None

        current = self._load_current(secret_id)
        strategy = self._resolve(secret_id, current)
        strategy.create_secret(secret_id, token, current.payload)
        return StepOutcome.COMPLETED, strategy

    def set_secret(self, secret_id: str, token: str) -> Tuple[StepOutcome, RotationStrategy]:
        current = self._load_current(secret_id)
        strategy = self._resolve(secret_id, current)
        pending = self._load_pending(secret_id, token)
        strategy.set_secret(secret_id, token, pending.payload, current.payload)
        return StepOutcome.COMPLETED, strategy

    def test_secret(self, secret_id: str, token: str) -> Tuple[StepOutcome, RotationStrategy]:
        current = self._load_current(secret_id)
        strategy = self._resolve(secret_id, current)
        pending = self._load_pending(secret_id, token)
        strategy.test_secret(secret_id, token, pending.payload)
        return StepOutcome.COMPLETED, strategy

    def finish_secret(self, secret_id: str, token: str) -> Tuple[StepOutcome, Optional[RotationStrategy]]:
        current = self._load_current(secret_id)
        if current.version_id == token:
            logger.info("Version %s already marked as %s", token, StageLabel.CURRENT.value)
            return StepOutcome.ALREADY_CURRENT, None

        strategy = self._resolve(secret_id, current)
        # Only the version staged for this attempt may become CURRENT
        self._load_pending(secret_id, token)
        strategy.finish_secret(secret_id, token, current)
        return StepOutcome.COMPLETED, strategy

    # ── Loading ───────────────────────────────────────────────────────

    def _pending_exists(self, secret_id: str, token: str) -> bool:
        try:
            self.store.get_secret_value(secret_id, StageLabel.PENDING, version_id=token)
        except SecretNotFoundError:
            return False
        return True

    def _load_current(self, secret_id: str) -> SecretVersion:
        """Fetch CURRENT once; it feeds both strategy selection and step data."""
        try:
            return self.store.get_secret_value(secret_id, StageLabel.CURRENT)
        except SecretNotFoundError as exc:
            raise StrategyResolutionError(
                f"Secret {secret_id!r} has no {StageLabel.CURRENT.value} version",
                secret_id=secret_id,
            ) from exc

    def _load_pending(self, secret_id: str, token: str) -> SecretVersion:
        return self.store.get_secret_value(secret_id, StageLabel.PENDING, version_id=token)

    def _resolve(self, secret_id: str, current: SecretVersion) -> RotationStrategy:
        try:
            payload = current.payload
        except InvalidPayloadError as exc:
            raise StrategyResolutionError(exc.message, secret_id=secret_id) from exc
        strategy = self.selector.select(payload, secret_id=secret_id)
        logger.debug("Resolved %s strategy for %s", strategy.name, secret_id)
        return strategy
