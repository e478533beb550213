from __future__ import annotations

import logging
from typing import Iterable

from uiheal.config.schema import EngineConfig
from uiheal.core.exceptions import HealingError, SelectorValidationError
from uiheal.core.failures import HealingStrategy, classify_failure
from uiheal.core.memory import HealingMemory
from uiheal.core.metadata import HealingOutcome
from uiheal.core.page import PageQueryPort
from uiheal.core.steps import TestStep
from uiheal.core.strategies import LocatorStrategy, StrategyContext, default_strategies
from uiheal.logging.artifacts import ArtifactManager
from uiheal.logging.audit import HealingAuditLogger
from uiheal.utils.dom_extract import ELEMENT_TEXT_SCRIPT, PAGE_CONTEXT_SCRIPT, PAGE_SOURCE_SCRIPT
from uiheal.utils.scoring import score_healing_confidence
from uiheal.utils.wait import wait_until

log = logging.getLogger(__name__)


class SelectorHealer:
    """Repairs failed test steps against the live page.

    The error picks a healing family. Locator failures run the strategy chain
    in priority order and stop at the first candidate that resolves to exactly
    one element; the other families patch timeouts or expected values and are
    verified by re-querying the step's locator. Healing never raises: every
    path ends in a :class:`HealingOutcome`.
    """

    def __init__(
        self,
        page: PageQueryPort,
        config: EngineConfig | None = None,
        memory: HealingMemory | None = None,
        audit_logger: HealingAuditLogger | None = None,
        artifact_manager: ArtifactManager | None = None,
        strategies: Iterable[LocatorStrategy] | None = None,
    ) -> None:
        self.page = page
        self.config = config or EngineConfig()
        self.memory = memory or HealingMemory(self.config.healing.max_history)
        self.audit_logger = audit_logger
        self.artifact_manager = artifact_manager
        if strategies is None:
            strategies = default_strategies(self.config.healing.semantic_threshold)
        self.strategies = tuple(strategies)

    def heal(self, failed_step: TestStep, error: BaseException | str) -> HealingOutcome:
        family = classify_failure(error)
        log.info("Attempting to heal step %r using %s", failed_step.name, family.value)
        attempted: list[str] = []
        try:
            outcome = self._heal_with(family, failed_step, attempted)
        except HealingError as exc:
            outcome = self._last_resort(family, failed_step, attempted, exc)
        except Exception as exc:  # noqa: BLE001 - page errors are reported as a failed outcome.
            log.warning("Healing step %r failed unexpectedly: %s", failed_step.name, exc)
            outcome = self._failure(family, f"Healing failed: {exc}", attempted)

        if outcome.success and outcome.healed_step is not None:
            self.memory.record_success(failed_step, outcome.healed_step, outcome.strategy, self._page_context())
            log.info("Healed step %r: %s", failed_step.name, outcome.explanation)
        else:
            log.warning("Could not heal step %r: %s", failed_step.name, outcome.explanation)
        self._audit(failed_step, outcome, error)
        return outcome

    def _heal_with(self, family: HealingStrategy, step: TestStep, attempted: list[str]) -> HealingOutcome:
        match family:
            case HealingStrategy.SELECTOR:
                healed = self._heal_selector(step, attempted)
            case HealingStrategy.TIMING:
                healed = self._verified(step.model_copy(update={"timeout": self._base_timeout(step) * 2}))
            case HealingStrategy.CONTENT:
                healed = self._verified(self._heal_content(step))
            case HealingStrategy.INTERACTION:
                healed = self._verified(step)
            case HealingStrategy.GENERIC:
                healed = self._verified(self._generic(step))
        return self._success(family, healed, attempted, f"Successfully healed test using {family.value}")

    def _last_resort(
        self,
        family: HealingStrategy,
        step: TestStep,
        attempted: list[str],
        cause: HealingError,
    ) -> HealingOutcome:
        if family == HealingStrategy.SELECTOR and step.locator:
            try:
                healed = self._verified(self._generic(step), unique=True)
            except HealingError:
                pass
            else:
                return self._success(
                    HealingStrategy.GENERIC,
                    healed,
                    attempted,
                    "Selector strategies exhausted; original locator resolved after extending the timeout",
                )
        return self._failure(family, f"Failed to heal test using {family.value}: {cause}", attempted)

    def _heal_selector(self, step: TestStep, attempted: list[str]) -> TestStep:
        if not step.locator:
            raise HealingError("Step has no locator to heal")

        for candidate in self.memory.lookup(step.locator):
            if candidate in attempted:
                continue
            if self._accept(candidate, attempted):
                log.info("Reused cached substitute %s for %s", candidate, step.locator)
                return step.model_copy(update={"locator": candidate})

        context = StrategyContext(self.page, step, self.config.detection)
        limit = self.config.healing.max_candidates_per_strategy
        for strategy in self.strategies:
            try:
                candidates = strategy.find(context)
            except Exception as exc:  # noqa: BLE001 - a broken strategy yields no candidate.
                log.debug("Strategy %s failed: %s", strategy.name, exc)
                continue
            log.debug("Strategy %s proposed %d candidates", strategy.name, len(candidates))
            for candidate in candidates[:limit]:
                if candidate in attempted:
                    continue
                if self._accept(candidate, attempted):
                    log.info("Strategy %s replaced %s with %s", strategy.name, step.locator, candidate)
                    return step.model_copy(update={"locator": candidate})
        raise HealingError(f"no strategy produced a valid locator for {step.locator}")

    def _accept(self, candidate: str, attempted: list[str]) -> bool:
        attempted.append(candidate)
        try:
            self._validate_locator(candidate)
        except SelectorValidationError as exc:
            log.debug("Rejected %s: %s", candidate, exc)
            return False
        return True

    def _validate_locator(self, locator: str) -> None:
        try:
            matches = self.page.query_all(locator)
        except Exception as exc:  # noqa: BLE001 - unsupported syntax is a rejection, not a fault.
            raise SelectorValidationError(f"Locator could not be evaluated: {exc}") from exc
        if not matches:
            raise SelectorValidationError("Locator did not match any element")
        if len(matches) > 1:
            raise SelectorValidationError(f"Locator matched {len(matches)} elements")

    def _heal_content(self, step: TestStep) -> TestStep:
        if not step.expected:
            return step
        handle = self.page.query_first(step.locator or "body")
        if handle is None:
            raise HealingError("Content target is no longer on the page")
        live_text = (self.page.evaluate(ELEMENT_TEXT_SCRIPT, handle) or "").strip()
        if not live_text or live_text == step.expected:
            raise HealingError("Live content offers no replacement for the expected value")
        return step.model_copy(update={"expected": live_text})

    def _generic(self, step: TestStep) -> TestStep:
        return step.model_copy(update={"timeout": int(self._base_timeout(step) * 1.5)})

    def _base_timeout(self, step: TestStep) -> int:
        return step.timeout or self.config.healing.default_timeout_ms

    def _verified(self, step: TestStep, unique: bool = False) -> TestStep:
        if not step.locator:
            return step
        check = self._resolves_uniquely if unique else self._resolves
        if wait_until(lambda: check(step.locator), self.config.healing.retry_window_seconds):
            return step
        raise HealingError(f"{step.locator} still does not resolve")

    def _resolves_uniquely(self, locator: str) -> bool:
        try:
            self._validate_locator(locator)
        except SelectorValidationError as exc:
            log.debug("Re-query of %s rejected: %s", locator, exc)
            return False
        return True

    def _resolves(self, locator: str) -> bool:
        try:
            return self.page.query_first(locator) is not None
        except Exception as exc:  # noqa: BLE001 - an unusable locator simply does not resolve.
            log.debug("Re-query of %s failed: %s", locator, exc)
            return False

    def _success(
        self,
        family: HealingStrategy,
        healed: TestStep,
        attempted: list[str],
        explanation: str,
    ) -> HealingOutcome:
        return HealingOutcome(
            success=True,
            healed_step=healed,
            strategy=family,
            confidence=score_healing_confidence(healed.locator),
            explanation=explanation,
            attempted_locators=list(attempted),
        )

    @staticmethod
    def _failure(family: HealingStrategy, explanation: str, attempted: list[str]) -> HealingOutcome:
        return HealingOutcome(
            success=False,
            strategy=family,
            confidence=0,
            explanation=explanation,
            attempted_locators=list(attempted),
        )

    def _page_context(self) -> dict:
        try:
            context = self.page.evaluate(PAGE_CONTEXT_SCRIPT)
        except Exception as exc:  # noqa: BLE001 - context is optional audit data.
            log.debug("Could not capture page context: %s", exc)
            return {}
        return context if isinstance(context, dict) else {}

    def _audit(self, step: TestStep, outcome: HealingOutcome, error: BaseException | str) -> None:
        timestamp = ArtifactManager.timestamp()
        if self.audit_logger is not None:
            try:
                self.audit_logger.write(step, outcome, str(error) or type(error).__name__, timestamp)
            except OSError as exc:
                log.warning("Could not write healing audit entry: %s", exc)
        if outcome.success or self.artifact_manager is None or not self.config.artifacts.capture_dom_on_failure:
            return
        try:
            page_source = self.page.evaluate(PAGE_SOURCE_SCRIPT)
            path = self.artifact_manager.write_dom_snapshot(step.name, page_source or "", timestamp)
        except Exception as exc:  # noqa: BLE001 - a missing snapshot must not mask the outcome.
            log.warning("Could not capture DOM snapshot for %r: %s", step.name, exc)
            return
        log.info("Saved DOM snapshot for failed heal to %s", path)
