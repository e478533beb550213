from __future__ import annotations

from uiheal.config.schema import EngineConfig
from uiheal.core.healer import SelectorHealer
from uiheal.core.memory import HealingMemory
from uiheal.core.metadata import HealingOutcome, InteractiveElement, RobustLocatorSuggestions, StabilityReport
from uiheal.core.page import PageQueryPort
from uiheal.core.scanner import ElementScanner
from uiheal.core.stability import StabilityAnalyzer
from uiheal.core.steps import TestStep
from uiheal.logging.artifacts import ArtifactManager
from uiheal.logging.audit import HealingAuditLogger


class SelfHealingEngine:
    """Scanning, healing and stability analysis bound to one page."""

    def __init__(
        self,
        page: PageQueryPort,
        config: EngineConfig | None = None,
        audit_logger: HealingAuditLogger | None = None,
        artifact_manager: ArtifactManager | None = None,
    ) -> None:
        self.page = page
        self.config = config or EngineConfig()
        self.memory = HealingMemory(self.config.healing.max_history)
        self.scanner = ElementScanner(page, self.config.detection)
        self.healer = SelectorHealer(
            page,
            self.config,
            memory=self.memory,
            audit_logger=audit_logger,
            artifact_manager=artifact_manager,
        )
        self.analyzer = StabilityAnalyzer(page, self.config.detection.text_limit)

    @classmethod
    def with_artifacts(cls, page: PageQueryPort, config: EngineConfig | None = None) -> "SelfHealingEngine":
        config = config or EngineConfig()
        root = config.artifacts.root
        return cls(page, config, HealingAuditLogger(root), ArtifactManager(root))

    def scan(self) -> list[InteractiveElement]:
        return self.scanner.scan()

    def heal(self, failed_step: TestStep, error: BaseException | str) -> HealingOutcome:
        return self.healer.heal(failed_step, error)

    def analyze_stability(self, locator: str) -> StabilityReport:
        return self.analyzer.analyze(locator)

    def suggest_robust_locators(self, locators: list[str]) -> RobustLocatorSuggestions:
        return self.analyzer.suggest_robust_locators(locators)
