"""Milk entry use cases"""
from .ingest_entry import IngestEntry
from .ingest_packet import IngestPacket, RecordDecodeFailure
from .correct_entry import CorrectEntry
from .list_entries import ListEntries
from .list_amcu_logs import ListAmcuLogs
from .dtos import (
    DecodedPacketDTO,
    IngestEntryCommandDTO,
    CorrectEntryCommandDTO,
    EntryResponseDTO,
    ListEntriesResponseDTO,
    PacketIngestResultDTO,
    AmcuLogDTO,
)

__all__ = [
    "IngestEntry",
    "IngestPacket",
    "RecordDecodeFailure",
    "CorrectEntry",
    "ListEntries",
    "ListAmcuLogs",
    "DecodedPacketDTO",
    "IngestEntryCommandDTO",
    "CorrectEntryCommandDTO",
    "EntryResponseDTO",
    "ListEntriesResponseDTO",
    "PacketIngestResultDTO",
    "AmcuLogDTO",
]
