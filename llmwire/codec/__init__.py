"""OpenAI-compatible wire codecs: request bodies, responses and SSE streams."""

from llmwire.codec.request import encode, encode_chat_body, encode_context, encode_message
from llmwire.codec.response import decode_response, extract_usage
from llmwire.codec.stream import SSEParser, decode_event

__all__ = [
    "SSEParser",
    "decode_event",
    "decode_response",
    "encode",
    "encode_chat_body",
    "encode_context",
    "encode_message",
    "extract_usage",
]
