from .anthropic import AnthropicEnhancer
from .base import ChatCompletionEnhancer, DescriptionEnhancer, NoOpEnhancer
from .openai import OpenAIEnhancer

__all__ = [
    "AnthropicEnhancer",
    "ChatCompletionEnhancer",
    "DescriptionEnhancer",
    "NoOpEnhancer",
    "OpenAIEnhancer",
]
