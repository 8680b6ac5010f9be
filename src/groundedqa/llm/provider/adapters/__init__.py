from groundedqa.llm.provider.adapters.bedrock import BedrockProvider
from groundedqa.llm.provider.adapters.openai import OpenAIProvider
from groundedqa.llm.provider.adapters.vertex import VertexProvider

__all__ = ["BedrockProvider", "OpenAIProvider", "VertexProvider"]
