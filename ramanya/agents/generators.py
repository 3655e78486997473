"""
Generation backends - the generate(model_id, instruction, text) collaborator.
Ollama for real models; a scripted mock for development and tests.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import ollama

from ..core.prompts import RESPONSE_SCHEMA


class BaseGenerator(ABC):
    """
    Abstract base class for generation backends.
    Implementations may raise on model unavailability.
    """

    @abstractmethod
    def generate(self, model_id: str, system_instruction: str, user_text: str) -> Optional[str]:
        """
        Run one generation.

        Args:
            model_id: Model identifier understood by the backend
            system_instruction: Assembled system prompt
            user_text: The message to translate

        Returns:
            Raw model text, or None/empty when the model produced nothing
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        """Get current status of this backend."""
        return {
            "generator_type": self.__class__.__name__,
            "status": "ready"
        }


class OllamaGenerator(BaseGenerator):
    """
    Generator that uses a local Ollama instance.
    The response schema is passed as the structured output format.
    """

    def __init__(self, host: str = None, temperature: float = 0.2):
        self.host = host
        self.temperature = temperature
        self._client = ollama.Client(host=host) if host else ollama.Client()

    def generate(self, model_id: str, system_instruction: str, user_text: str) -> Optional[str]:
        response = self._client.chat(
            model=model_id,
            messages=[
                {'role': 'system', 'content': system_instruction},
                {'role': 'user', 'content': user_text}
            ],
            format=RESPONSE_SCHEMA,
            options={
                'temperature': self.temperature
            }
        )

        # Extract response content
        return (response.get('message') or {}).get('content', '')

    def get_status(self) -> Dict[str, Any]:
        """Get current status with Ollama-specific information."""
        status = super().get_status()
        status.update({
            'host': self.host,
            'ollama_available': self._check_ollama_health()
        })
        return status

    def _check_ollama_health(self) -> bool:
        """Check if Ollama is reachable."""
        try:
            self._client.list()
            return True
        except Exception:
            return False


class MockGenerator(BaseGenerator):
    """
    Scripted generator used for testing, development, and when Ollama is unavailable.

    `responses` maps a model id to either a string (returned as-is), an
    Exception instance (raised), or None (an empty answer). Unscripted model ids
    get an echo translation so the relay stays usable offline.
    """

    def __init__(self, responses: Dict[str, Union[str, Exception, None]] = None):
        self.responses = dict(responses or {})
        self.calls: List[Dict[str, Any]] = []

    def generate(self, model_id: str, system_instruction: str, user_text: str) -> Optional[str]:
        self.calls.append({
            "model_id": model_id,
            "system_instruction": system_instruction,
            "user_text": user_text,
            "timestamp": datetime.now().isoformat()
        })

        if model_id in self.responses:
            scripted = self.responses[model_id]
            if isinstance(scripted, Exception):
                raise scripted
            return scripted

        return json.dumps({
            "source_language": "unknown",
            "translation": user_text,
            "notes": f"Mock translation from {model_id}; no model was called."
        }, ensure_ascii=False)


def get_generator(config) -> BaseGenerator:
    """Get configured generation backend."""
    if config.generator_provider == "mock":
        return MockGenerator()
    return OllamaGenerator(host=config.ollama_host, temperature=config.temperature)
