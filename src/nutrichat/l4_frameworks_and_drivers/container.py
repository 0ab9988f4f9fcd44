"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from nutrichat.l1_entities.config import AppConfig
from nutrichat.l1_entities.template import CoachTemplate
from nutrichat.l2_use_cases.ports.analysis_gateway import AnalysisGateway
from nutrichat.l2_use_cases.ports.food_ledger import FoodLedger
from nutrichat.l2_use_cases.ports.llm_client import LLMClient
from nutrichat.l2_use_cases.ports.settings_provider import SettingsProvider
from nutrichat.l3_interface_adapters.controllers.request_orchestrator import RequestOrchestrator
from nutrichat.l3_interface_adapters.gateways.jsonl_food_ledger import JsonlFoodLedger
from nutrichat.l3_interface_adapters.gateways.llm_analysis_gateway import LLMAnalysisGateway
from nutrichat.l3_interface_adapters.gateways.ollama_llm_client import OllamaLLMClient
from nutrichat.l3_interface_adapters.gateways.openai_llm_client import OpenAICompatLLMClient
from nutrichat.l3_interface_adapters.gateways.yaml_settings_provider import YamlSettingsProvider
from nutrichat.l4_frameworks_and_drivers.infra_config import InfraConfig


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        template: CoachTemplate,
        infra: InfraConfig | None = None,
        config_path: str | None = None,
    ) -> None:
        self.config = config
        self.template = template

        _infra = infra or InfraConfig()
        self.llm_client: LLMClient = self._build_llm_client(_infra)
        self.gateway: AnalysisGateway = LLMAnalysisGateway(
            self.llm_client,
            template,
            analysis=config.analysis,
            coaching=config.coaching,
        )
        self.ledger: FoodLedger = JsonlFoodLedger(Path(config.ledger.path).expanduser())
        self.settings: SettingsProvider = YamlSettingsProvider(config_path)

        self.orchestrator = RequestOrchestrator(
            config=config,
            template=template,
            gateway=self.gateway,
            ledger=self.ledger,
            settings=self.settings,
        )

    @staticmethod
    def _build_llm_client(infra: InfraConfig) -> LLMClient:
        if infra.llm_provider == 'openai':
            return OpenAICompatLLMClient(api_key=infra.openai.api_key, base_url=infra.openai.base_url)
        return OllamaLLMClient(host=infra.ollama.host)
