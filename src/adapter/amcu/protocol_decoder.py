"""AMCU Protocol Decoder

Turns the line-oriented text stream of an automatic milk collection unit
into one packet per farmer pour.

Wire format (one field per line, packet closed by END):

    CID:1042
    QTY:5.25
    FAT:4.1
    SNF:8.6
    SHIFT:M
    END

Required fields are CID and QTY. FAT, SNF, CLR and AMT are optional
(non-numeric or zero means absent). SHIFT, MILK, DATE and TIME are optional
and defaulted from the decoder clock. Malformed lines are skipped; a packet
that fails validation is reported as a DecodeOutcome carrying a DecodeError
and the stream continues.
"""

import codecs
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Dict, List, Optional, Union
from src.app.use_cases.entries.dtos import DecodedPacketDTO
from src.domain.milk_entry import Shift
from src.domain.rate_card import MilkType

logger = logging.getLogger(__name__)

END_SENTINEL = "END"

SHIFT_ALIASES = {
    "M": Shift.MORNING,
    "MORNING": Shift.MORNING,
    "E": Shift.EVENING,
    "EVENING": Shift.EVENING,
}

MILK_ALIASES = {
    "COW": MilkType.COW,
    "C": MilkType.COW,
    "BUFFALO": MilkType.BUFFALO,
    "BUF": MilkType.BUFFALO,
    "B": MilkType.BUFFALO,
    "MIXED": MilkType.MIXED,
    "MIX": MilkType.MIXED,
}

TIME_FORMATS = ("%H:%M:%S", "%H:%M")


class DecodeError(Exception):
    """A finalized packet failed validation"""

    def __init__(self, reason: str, raw: Optional[Dict[str, str]] = None):
        self.reason = reason
        self.raw = dict(raw or {})
        super().__init__(reason)


class DecoderState(str, Enum):
    IDLE = "IDLE"
    ACCUMULATING = "ACCUMULATING"


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of finalizing one packet: either packet or error is set"""

    raw: Dict[str, str]
    packet: Optional[DecodedPacketDTO] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def raw_text(self) -> str:
        lines = [f"{key}:{value}" for key, value in self.raw.items()]
        lines.append(END_SENTINEL)
        return "\n".join(lines)


class LineFramer:
    """
    Re-entrant line splitter for chunked input

    Partial lines stay buffered until their newline arrives, carriage
    returns are dropped, and multi-byte UTF-8 sequences split across chunks
    are reassembled.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return [line.replace("\r", "") for line in lines]

    def flush(self) -> List[str]:
        """Return whatever is buffered as a final line (stream closed)"""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        tail = tail.replace("\r", "")
        return [tail] if tail else []


class AmcuProtocolDecoder:
    """
    Stateful packet assembler, one per physical connection

    States: IDLE -> ACCUMULATING (KEY:VALUE lines) -> END -> IDLE.
    A CID line while a packet is in progress discards the in-progress
    fields so nothing leaks from one farmer into the next.

    Usage:
        decoder = AmcuProtocolDecoder()
        for outcome in decoder.feed(chunk):
            if outcome.ok:
                await ingest(outcome.packet)
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            clock: Returns the local time used for missing DATE/TIME/SHIFT
        """
        self.clock = clock
        self.state = DecoderState.IDLE
        self._framer = LineFramer()
        self._fields: Dict[str, str] = {}

    def feed(self, chunk: Union[bytes, str]) -> List[DecodeOutcome]:
        """
        Feed an arbitrary chunk of the stream

        Args:
            chunk: Raw bytes or text, possibly ending mid-line

        Returns:
            Outcomes for every packet finalized by this chunk
        """
        outcomes = []
        for line in self._framer.feed(chunk):
            outcome = self.feed_line(line)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def close(self) -> List[DecodeOutcome]:
        """Process a trailing unterminated line when the stream ends"""
        outcomes = []
        for line in self._framer.flush():
            outcome = self.feed_line(line)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def feed_line(self, line: str) -> Optional[DecodeOutcome]:
        """
        Apply one complete line to the state machine

        Returns:
            DecodeOutcome when the line was END and a packet was in progress
        """
        line = line.strip()
        if not line:
            return None

        if line == END_SENTINEL:
            return self._finalize()

        colon = line.find(":")
        if colon <= 0:
            logger.debug(f"Ignoring malformed AMCU line: {line!r}")
            return None

        key = line[:colon].strip().upper()
        value = line[colon + 1:].strip()
        if not key:
            logger.debug(f"Ignoring AMCU line with empty key: {line!r}")
            return None

        if key == "CID" and self._fields:
            logger.warning(f"New CID before END, discarding partial packet {self._fields}")
            self._fields.clear()

        self._fields[key] = value
        self.state = DecoderState.ACCUMULATING
        return None

    def reset(self) -> None:
        """Forget buffered bytes and any partial packet (new connection)"""
        self._framer = LineFramer()
        self._fields.clear()
        self.state = DecoderState.IDLE

    def _finalize(self) -> Optional[DecodeOutcome]:
        raw = dict(self._fields)
        self._fields.clear()
        self.state = DecoderState.IDLE
        if not raw:
            return None

        try:
            packet = parse_packet(raw, self.clock())
        except DecodeError as e:
            logger.warning(f"AMCU packet rejected: {e.reason} raw={raw}")
            return DecodeOutcome(raw=raw, error=e)

        return DecodeOutcome(raw=raw, packet=packet)


def parse_packet(raw: Dict[str, str], now: datetime) -> DecodedPacketDTO:
    """
    Validate a finalized field map and apply defaults

    Args:
        raw: Upper-cased keys mapped to trimmed values
        now: Local time used for missing DATE/TIME/SHIFT

    Returns:
        DecodedPacketDTO

    Raises:
        DecodeError: Missing/invalid required field or invalid enumerated field
    """
    customer_external_id = raw.get("CID", "").strip()
    if not customer_external_id:
        raise DecodeError("Missing CID", raw)

    quantity = _optional_decimal(raw, "QTY")
    if quantity is None:
        raise DecodeError("Missing or invalid QTY", raw)

    entry_date = _parse_date(raw)
    entry_time = _parse_time(raw, now)
    return DecodedPacketDTO(
        customer_external_id=customer_external_id,
        quantity_litre=quantity,
        fat=_optional_decimal(raw, "FAT"),
        snf=_optional_decimal(raw, "SNF"),
        clr=_optional_decimal(raw, "CLR"),
        amount=_optional_decimal(raw, "AMT"),
        shift=_parse_shift(raw, entry_time),
        milk_type=_parse_milk_type(raw),
        entry_date=entry_date or now.date(),
        entry_time=entry_time,
        raw=raw,
    )


def _optional_decimal(raw: Dict[str, str], key: str) -> Optional[Decimal]:
    # Non-numeric or zero means absent; negative is a broken reading
    value = raw.get(key)
    if value is None or value == "":
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    if not number.is_finite() or number == 0:
        return None
    if number < 0:
        raise DecodeError(f"Negative {key}: {value}", raw)
    return number


def _parse_shift(raw: Dict[str, str], entry_time: time) -> Shift:
    value = raw.get("SHIFT", "").upper()
    if not value:
        # Follows the packet TIME when sent, so a replayed backlog keeps its shift
        return Shift.MORNING if entry_time.hour < 12 else Shift.EVENING
    shift = SHIFT_ALIASES.get(value)
    if shift is None:
        raise DecodeError(f"Invalid SHIFT: {raw['SHIFT']}", raw)
    return shift


def _parse_milk_type(raw: Dict[str, str]) -> Optional[MilkType]:
    value = raw.get("MILK", "").upper()
    if not value:
        return None
    milk_type = MILK_ALIASES.get(value)
    if milk_type is None:
        raise DecodeError(f"Invalid MILK: {raw['MILK']}", raw)
    return milk_type


def _parse_date(raw: Dict[str, str]) -> Optional[date]:
    value = raw.get("DATE", "")
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise DecodeError(f"Invalid DATE: {value}", raw)


def _parse_time(raw: Dict[str, str], now: datetime) -> time:
    value = raw.get("TIME", "")
    if not value:
        return now.time().replace(microsecond=0)
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise DecodeError(f"Invalid TIME: {value}", raw)
