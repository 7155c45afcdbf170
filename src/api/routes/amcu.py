"""AMCU API Routes

Packet simulation, packet logs, bridge status and the live event stream.
"""

import asyncio
import json
import logging
from typing import List
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.amcu_request import SimulatePacketRequestSchema
from src.app.use_cases.entries import ListAmcuLogs, AmcuLogDTO, PacketIngestResultDTO
from src.adapter.amcu import AmcuProtocolDecoder, PacketIngestor
from src.adapter.repositories.amcu_log_repository import SqlAlchemyAmcuLogRepository
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.rate_cache import InMemoryRateCache
from src.depends import get_session, get_rate_cache, get_event_bus, rate_engine_options

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/amcu", tags=["AMCU"])

KEEPALIVE_SECONDS = 15


@router.post("/simulate", response_model=List[PacketIngestResultDTO])
async def simulate_packets(
    request: SimulatePacketRequestSchema,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
):
    """
    Feed raw collection unit text through the same path as the live bridge

    Returns one result per packet found in the text, in order. Malformed
    packets are logged and reported with `parsed_ok=false`; they never stop
    the following packets.
    """
    text = request.text if request.text.endswith("\n") else request.text + "\n"

    decoder = AmcuProtocolDecoder()
    outcomes = decoder.feed(text) + decoder.close()

    ingestor = PacketIngestor(None, rate_cache, event_bus, rate_engine_options())
    return [await ingestor.process_in_session(session, outcome) for outcome in outcomes]


@router.get("/logs", response_model=List[AmcuLogDTO])
async def list_logs(
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
):
    """Most recent packet logs first"""
    result = await ListAmcuLogs(SqlAlchemyAmcuLogRepository(session)).execute(limit)
    return result.value


@router.get("/status")
async def bridge_status(request: Request, event_bus: InMemoryEventBus = Depends(get_event_bus)):
    listener = getattr(request.app.state, "amcu_listener", None)
    status = listener.status() if listener else {"enabled": False}
    status["event_subscribers"] = event_bus.subscriber_count
    return status


def format_sse(event) -> str:
    payload = json.dumps(event.model_dump(mode="json"))
    return f"id: {event.event_id}\nevent: {event.name}\ndata: {payload}\n\n"


@router.get("/events")
async def stream_events(request: Request, event_bus: InMemoryEventBus = Depends(get_event_bus)):
    """
    Server-sent events: entry.created, decoder.error, payment.recorded

    A comment line is sent every 15 seconds so idle proxies keep the
    connection open.
    """

    async def event_generator():
        async with event_bus.subscription() as queue:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(event)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
