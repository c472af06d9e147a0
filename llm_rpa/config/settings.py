"""
LLM settings object and its persistence stores.

LLMSettings is an explicit object handed to CompletionClient and
ExecutionOrchestrator; there is no module-level settings singleton.
Persistence is an injected SettingsStore:

- JsonFileSettingsStore: small JSON document under the user config
  directory (default ~/.llm-rpa/config/llm-settings.json, override the
  directory with LLM_RPA_CONFIG_DIR)
- InMemorySettingsStore: for tests and embedding

Persistence is best-effort. A missing or unreadable file yields defaults; a
failed save is logged and otherwise ignored. Settings are loaded on first use
and every setter persists immediately.

Example:
    >>> settings = LLMSettings(JsonFileSettingsStore())
    >>> settings.set_provider("openai")
    >>> settings.selected_model_id
    'gpt-4o'
    >>> settings.set_max_tokens(50)
    >>> settings.max_tokens
    100

Security:
    - API keys are stored only in the settings file
    - API keys are NEVER logged
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from llm_rpa.config.constants import (
    CONFIG_DIR_ENV_VAR,
    DEFAULT_CONFIG_DIR,
    SETTINGS_FILENAME,
)
from llm_rpa.config.schema import LLMSettingsData
from llm_rpa.llm_runner.catalog import Provider, models_for

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    """Read/write contract for settings persistence."""

    def load(self) -> LLMSettingsData | None:
        """Return stored settings, or None when nothing usable is stored."""
        ...

    def save(self, data: LLMSettingsData) -> None:
        """Persist settings. Must not raise."""
        ...


def default_settings_path() -> Path:
    """
    Resolve the settings file path.

    Returns:
        Path: $LLM_RPA_CONFIG_DIR/llm-settings.json if the variable is set,
            otherwise ~/.llm-rpa/config/llm-settings.json
    """
    config_dir = os.environ.get(CONFIG_DIR_ENV_VAR) or DEFAULT_CONFIG_DIR
    return Path(config_dir).expanduser() / SETTINGS_FILENAME


class JsonFileSettingsStore:
    """
    Settings persisted as a pretty-printed JSON document.

    Attributes:
        path: Settings file location
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else default_settings_path()

    def load(self) -> LLMSettingsData | None:
        if not self.path.exists():
            logger.debug(f"No settings file at {self.path}, using defaults")
            return None

        try:
            with self.path.open(encoding="utf-8") as f:
                raw = json.load(f)
            return LLMSettingsData.model_validate(raw)
        except (OSError, ValueError) as e:
            # Never include file content: it holds API keys
            logger.warning(
                f"Failed to read settings from {self.path}, using defaults: "
                f"{type(e).__name__}"
            )
            return None

    def save(self, data: LLMSettingsData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(data.model_dump(by_alias=True), f, indent=4)
        except OSError as e:
            logger.warning(f"Failed to save settings to {self.path}: {e}")


class InMemorySettingsStore:
    """
    Settings kept in memory.

    Attributes:
        data: Last saved settings (None until the first save)
        save_count: Number of save() calls
    """

    def __init__(self, data: LLMSettingsData | None = None):
        self.data = data
        self.save_count = 0

    def load(self) -> LLMSettingsData | None:
        return self.data.model_copy() if self.data is not None else None

    def save(self, data: LLMSettingsData) -> None:
        self.data = data.model_copy()
        self.save_count += 1


class LLMSettings:
    """
    Read/write access to LLM settings backed by a SettingsStore.

    Getters load from the store on first use. Setters clamp their input
    (via LLMSettingsData validators) and persist immediately.
    """

    def __init__(self, store: SettingsStore | None = None):
        self.store = store if store is not None else JsonFileSettingsStore()
        self._data: LLMSettingsData | None = None

    def load(self) -> None:
        """(Re)load settings from the store, falling back to defaults."""
        data = self.store.load()
        self._data = data if data is not None else LLMSettingsData()

    def save(self) -> None:
        self.store.save(self.data)

    @property
    def data(self) -> LLMSettingsData:
        if self._data is None:
            self.load()
        return self._data

    def snapshot(self) -> LLMSettingsData:
        """Return a detached copy, so one generation sees consistent values."""
        return self.data.model_copy()

    @property
    def selected_provider(self) -> Provider:
        return self.data.selected_provider

    @property
    def selected_model_id(self) -> str:
        return self.data.selected_model_id

    @property
    def max_tokens(self) -> int:
        return self.data.max_tokens

    @property
    def temperature(self) -> float:
        return self.data.temperature

    @property
    def request_timeout(self) -> float:
        return self.data.request_timeout

    @property
    def max_attempts(self) -> int:
        return self.data.max_attempts

    @property
    def custom_endpoint(self) -> str:
        return self.data.custom_endpoint

    def api_key(self, provider: Provider) -> str | None:
        """Return the credential for a provider, or None if blank."""
        key = self.data.api_key_for(provider)
        return key if key and not key.isspace() else None

    def has_valid_api_key(self) -> bool:
        """True if the active provider has a non-blank credential."""
        return self.api_key(self.selected_provider) is not None

    def set_api_key(self, provider: Provider, key: str) -> None:
        setattr(self.data, f"{provider}_api_key", key.strip())
        logger.info(f"Updated API key for provider: {provider}")
        self.save()

    def set_custom_endpoint(self, endpoint: str) -> None:
        self.data.custom_endpoint = endpoint.strip()
        self.save()

    def set_provider(self, provider: Provider) -> None:
        """
        Select a provider and reset the model to its first catalog entry.

        Selecting the custom provider clears the model selection.
        """
        self.data.selected_provider = provider
        models = models_for(self.data.selected_provider)
        self.data.selected_model_id = models[0].id if models else ""
        logger.info(
            f"Selected provider: {self.data.selected_provider}, "
            f"model: {self.data.selected_model_id or '(none)'}"
        )
        self.save()

    def set_model(self, model_id: str) -> None:
        self.data.selected_model_id = model_id
        self.save()

    def set_max_tokens(self, tokens: int) -> None:
        self.data.max_tokens = tokens
        self.save()

    def set_temperature(self, temperature: float) -> None:
        self.data.temperature = temperature
        self.save()

    def set_request_timeout(self, seconds: float) -> None:
        self.data.request_timeout = seconds
        self.save()

    def set_max_attempts(self, attempts: int) -> None:
        self.data.max_attempts = attempts
        self.save()
