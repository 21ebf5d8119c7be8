"""llmwire -- provider-agnostic option handling and wire codecs for OpenAI-compatible LLM APIs."""

__version__ = "0.1.0"

from llmwire.assembler import StreamAssembler
from llmwire.client import LLMClient
from llmwire.errors import (
    ApiRequestError,
    ApiResponseError,
    CollisionError,
    InvalidParameterError,
    InvalidProviderError,
    LLMWireError,
    UnknownError,
    ValidationError,
)
from llmwire.types import (
    ContentPart,
    Context,
    FinishReason,
    Message,
    Model,
    Operation,
    Response,
    StreamChunk,
    Tool,
    ToolCall,
    Usage,
    WireRequest,
)

__all__ = [
    "ApiRequestError",
    "ApiResponseError",
    "CollisionError",
    "ContentPart",
    "Context",
    "FinishReason",
    "InvalidParameterError",
    "InvalidProviderError",
    "LLMClient",
    "LLMWireError",
    "Message",
    "Model",
    "Operation",
    "Response",
    "StreamAssembler",
    "StreamChunk",
    "Tool",
    "ToolCall",
    "UnknownError",
    "Usage",
    "ValidationError",
    "WireRequest",
    "__version__",
]
