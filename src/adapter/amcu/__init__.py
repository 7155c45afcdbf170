from .protocol_decoder import (
    AmcuProtocolDecoder,
    DecodeError,
    DecodeOutcome,
    DecoderState,
    LineFramer,
    parse_packet,
)
from .ingestion import PacketIngestor

__all__ = [
    "AmcuProtocolDecoder",
    "DecodeError",
    "DecodeOutcome",
    "DecoderState",
    "LineFramer",
    "parse_packet",
    "PacketIngestor",
]
