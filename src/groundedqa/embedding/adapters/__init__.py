from groundedqa.embedding.adapters.bedrock import BedrockEmbeddingProvider
from groundedqa.embedding.adapters.openai import OpenAIEmbeddingProvider
from groundedqa.embedding.adapters.vertex import VertexEmbeddingProvider

__all__ = ["BedrockEmbeddingProvider", "OpenAIEmbeddingProvider", "VertexEmbeddingProvider"]
