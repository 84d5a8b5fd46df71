"""
Model configuration and switching for quiz and recommendation generation.
Centralized model management following DRY principle.
"""

from typing import Dict, Any, Optional
from enum import Enum

from utils.settings import get_settings


class ModelProvider(str, Enum):
    OPENAI = "openai"
    GROQ = "groq"


# Model configurations
MODEL_CONFIGS: Dict[str, Dict[str, Any]] = {
    "gpt-4o": {
        "provider": ModelProvider.OPENAI,
        "model": "gpt-4o",
        "max_tokens": 4096,
        "cost_per_1k_input": 0.0025,
        "cost_per_1k_output": 0.01,
        "supports_images": True,
        "supports_pdf": True,
        "temperature": 0.7
    },
    "gpt-4o-mini": {
        "provider": ModelProvider.OPENAI,
        "model": "gpt-4o-mini",
        "max_tokens": 4096,
        "cost_per_1k_input": 0.00015,
        "cost_per_1k_output": 0.0006,
        "supports_images": True,
        "supports_pdf": True,
        "temperature": 0.7
    },
    "llama-4-scout": {
        "provider": ModelProvider.GROQ,
        "model": "meta-llama/llama-4-scout-17b-16e-instruct",
        "max_tokens": 4096,
        "cost_per_1k_input": 0.00011,
        "cost_per_1k_output": 0.00034,
        "supports_images": True,
        "supports_pdf": False,
        "temperature": 0.7
    },
    "llama-4-maverick": {
        "provider": ModelProvider.GROQ,
        "model": "meta-llama/llama-4-maverick-17b-128e-instruct",
        "max_tokens": 4096,
        "cost_per_1k_input": 0.0002,
        "cost_per_1k_output": 0.0006,
        "supports_images": True,
        "supports_pdf": False,
        "temperature": 0.7
    }
}


class ModelConfig:
    """Model configuration manager"""

    @staticmethod
    def default_model() -> str:
        return get_settings().default_model

    @staticmethod
    def get_config(model_key: Optional[str] = None) -> Dict[str, Any]:
        """Get configuration for specified model or default"""
        key = model_key or ModelConfig.default_model()

        if key not in MODEL_CONFIGS:
            raise ValueError(f"Unknown model: {key}. Available: {list(MODEL_CONFIGS.keys())}")

        return {"key": key, **MODEL_CONFIGS[key]}

    @staticmethod
    def get_available_models() -> list:
        """List all available models"""
        return list(MODEL_CONFIGS.keys())

    @staticmethod
    def estimate_cost(model_key: str, input_tokens: int, output_tokens: int) -> float:
        """Estimate cost for a request"""
        config = ModelConfig.get_config(model_key)

        input_cost = (input_tokens / 1000) * config["cost_per_1k_input"]
        output_cost = (output_tokens / 1000) * config["cost_per_1k_output"]

        return round(input_cost + output_cost, 4)

    @staticmethod
    def supports_attachment(model_key: Optional[str], mime_type: str) -> bool:
        """Check if model accepts an inline attachment of this MIME type"""
        config = ModelConfig.get_config(model_key)
        if mime_type == "application/pdf":
            return config.get("supports_pdf", False)
        if mime_type.startswith("image/"):
            return config.get("supports_images", False)
        return False
