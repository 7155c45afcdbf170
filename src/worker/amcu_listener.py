"""AMCU Listener Background Worker

Bridges a milk collection unit (AMCU) that speaks the line-oriented
KEY:VALUE protocol over TCP. Received bytes are decoded into packets and
handed to a separate ingest task through a bounded queue. A full queue
holds the read loop back for at most the enqueue timeout; after that the
packet is dropped, logged to amcu_logs with QUEUE_FULL and announced as
decoder.error.
Can be run as a standalone script or started from the API lifespan.
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Set
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.amcu import AmcuProtocolDecoder, DecodeOutcome, PacketIngestor
from src.adapter.services.rate_cache import InMemoryRateCache
from src.app.services.event_publisher import EventPublisher
from src.app.services.rate_cache import RateCache
from src.app.use_cases.entries import PacketIngestResultDTO

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 4096


class AmcuListenerWorker:
    """
    Background worker for the collection unit bridge

    Features:
    - Reconnects after the unit drops the connection or is unreachable
    - Each packet is ingested in its own session; bad packets are logged
      and skipped
    - Ingestion runs under a timeout so one stuck packet cannot block
      the rest
    - Can run once (read until EOF) or continuously

    Usage:
        # Read one connection until the unit closes it
        worker = AmcuListenerWorker(host="192.168.1.50", port=4001)
        results = await worker.run_once()

        # Run continuously with reconnects
        worker = AmcuListenerWorker()
        await worker.run_forever()
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
        rate_cache: Optional[RateCache] = None,
        event_publisher: Optional[EventPublisher] = None,
        reconnect_seconds: Optional[float] = None,
        queue_size: Optional[int] = None,
        ingest_timeout: Optional[float] = None,
        enqueue_timeout: Optional[float] = None,
    ):
        """
        Initialize the worker

        Args:
            host: Collection unit address (defaults to ApplicationConfig.AMCU_HOST)
            port: Collection unit TCP port (defaults to ApplicationConfig.AMCU_PORT)
            db_uri: Database URI, used only when no session_factory is given
            session_factory: Shared session factory (the API passes its own)
            rate_cache: Shared rate cache so rate card edits are seen here too
            event_publisher: Receives entry.created and decoder.error events
            reconnect_seconds: Delay between connection attempts
            queue_size: Max decoded packets waiting for ingestion
            ingest_timeout: Seconds allowed for ingesting one packet
            enqueue_timeout: Seconds the read loop waits for queue space
                before dropping a packet
        """
        self.host = host or ApplicationConfig.AMCU_HOST
        self.port = port or ApplicationConfig.AMCU_PORT
        self.reconnect_seconds = (
            reconnect_seconds if reconnect_seconds is not None else ApplicationConfig.AMCU_RECONNECT_SECONDS
        )
        self.ingest_timeout = ingest_timeout or ApplicationConfig.REQUEST_TIMEOUT_SECONDS
        self.enqueue_timeout = (
            enqueue_timeout if enqueue_timeout is not None else ApplicationConfig.AMCU_ENQUEUE_TIMEOUT_SECONDS
        )

        # Create engine and session factory unless one is shared with us
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )

        self.ingestor = PacketIngestor(
            session_factory,
            rate_cache or InMemoryRateCache(ttl_seconds=ApplicationConfig.RATE_CACHE_TTL_SECONDS),
            event_publisher,
            rate_engine_options=dict(
                lookup_timeout=ApplicationConfig.RATE_LOOKUP_TIMEOUT_SECONDS,
                default_fat=Decimal(ApplicationConfig.DEFAULT_FAT),
                default_snf=Decimal(ApplicationConfig.DEFAULT_SNF),
            ),
        )
        self.decoder = AmcuProtocolDecoder()
        self.queue: asyncio.Queue = asyncio.Queue(
            maxsize=queue_size or ApplicationConfig.AMCU_INGEST_QUEUE_SIZE
        )

        self._task: Optional[asyncio.Task] = None
        self._ingest_task: Optional[asyncio.Task] = None
        self._stopping = False
        self._pending_records: Set[asyncio.Task] = set()

        self.connected = False
        self.packets_received = 0
        self.packets_ingested = 0
        self.packets_failed = 0
        self.packets_dropped = 0
        self.last_packet_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

        logger.info(f"AmcuListenerWorker initialized for {self.host}:{self.port}")

    def status(self) -> dict:
        """Snapshot of the bridge for the status endpoint"""
        return {
            "enabled": True,
            "host": self.host,
            "port": self.port,
            "connected": self.connected,
            "decoder_state": self.decoder.state.value,
            "queued": self.queue.qsize(),
            "packets_received": self.packets_received,
            "packets_ingested": self.packets_ingested,
            "packets_failed": self.packets_failed,
            "packets_dropped": self.packets_dropped,
            "last_packet_at": self.last_packet_at.isoformat() if self.last_packet_at else None,
            "last_error": self.last_error,
        }

    async def process_outcome(self, outcome: DecodeOutcome) -> Optional[PacketIngestResultDTO]:
        """
        Ingest one decoded packet, never raising

        Args:
            outcome: Decoder output (packet or decode error)

        Returns:
            PacketIngestResultDTO, or None when ingestion timed out or crashed
        """
        try:
            result = await asyncio.wait_for(self.ingestor.process(outcome), timeout=self.ingest_timeout)
        except asyncio.TimeoutError:
            self.packets_failed += 1
            self.last_error = f"Ingestion timed out after {self.ingest_timeout}s"
            logger.error(f"{self.last_error}: {outcome.raw_text!r}")
            return None
        except Exception as e:
            self.packets_failed += 1
            self.last_error = str(e)
            logger.error(f"Unexpected error ingesting packet {outcome.raw_text!r}: {e}")
            return None

        if result.parsed_ok:
            self.packets_ingested += 1
            logger.info(f"Ingested packet as entry {result.entry.id if result.entry else None}")
        else:
            self.packets_failed += 1
            self.last_error = result.error_message
            logger.warning(f"Packet rejected [{result.error_code}]: {result.error_message}")
        return result

    async def _enqueue(self, outcomes: List[DecodeOutcome]) -> None:
        """Queue outcomes, waiting up to enqueue_timeout for space before dropping"""
        for outcome in outcomes:
            self.packets_received += 1
            self.last_packet_at = datetime.utcnow()
            try:
                await asyncio.wait_for(self.queue.put(outcome), timeout=self.enqueue_timeout)
            except asyncio.TimeoutError:
                self._drop(outcome)

    def _drop(self, outcome: DecodeOutcome) -> None:
        self.packets_dropped += 1
        self.last_error = f"Ingest queue full for {self.enqueue_timeout}s, packet dropped"
        logger.error(f"{self.last_error}: {outcome.raw_text!r}")

        # Recorded off the read loop; the database may be the reason the queue is full
        task = asyncio.create_task(self._record_dropped(outcome, self.last_error))
        self._pending_records.add(task)
        task.add_done_callback(self._pending_records.discard)

    async def _record_dropped(self, outcome: DecodeOutcome, reason: str) -> None:
        try:
            await self.ingestor.record_dropped(outcome, reason)
        except Exception as e:
            logger.error(f"Could not record dropped packet {outcome.raw_text!r}: {e}")

    async def flush_dropped(self) -> None:
        """Wait until every dropped packet has been written to amcu_logs"""
        if self._pending_records:
            await asyncio.gather(*list(self._pending_records))

    async def _read_connection(self, reader: asyncio.StreamReader) -> None:
        """Read until EOF, queueing every decoded packet"""
        self.decoder.reset()
        while True:
            chunk = await reader.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            await self._enqueue(self.decoder.feed(chunk))
        await self._enqueue(self.decoder.close())

    async def _ingest_loop(self, results: Optional[List[PacketIngestResultDTO]] = None) -> None:
        while True:
            outcome = await self.queue.get()
            try:
                result = await self.process_outcome(outcome)
                if results is not None and result is not None:
                    results.append(result)
            finally:
                self.queue.task_done()

    async def _connect(self):
        reader, writer = await asyncio.open_connection(self.host, self.port)
        self.connected = True
        logger.info(f"Connected to collection unit at {self.host}:{self.port}")
        return reader, writer

    async def _disconnect(self, writer: asyncio.StreamWriter) -> None:
        self.connected = False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing collection unit connection: {e}")

    async def run_once(self) -> List[PacketIngestResultDTO]:
        """
        Read a single connection until the unit closes it

        Packets are ingested while the connection is still being read, so
        the queue bound applies exactly as in run_forever.

        Returns:
            Results for every packet that was ingested or rejected
        """
        results: List[PacketIngestResultDTO] = []
        ingest_task = asyncio.create_task(self._ingest_loop(results))
        try:
            reader, writer = await self._connect()
            try:
                await self._read_connection(reader)
            finally:
                await self._disconnect(writer)
            await self.queue.join()
        finally:
            ingest_task.cancel()
            try:
                await ingest_task
            except asyncio.CancelledError:
                pass
        await self.flush_dropped()

        logger.info(
            f"AMCU read complete: {self.packets_received} received, "
            f"{self.packets_ingested} ingested, {self.packets_failed} failed, "
            f"{self.packets_dropped} dropped"
        )
        return results

    async def run_forever(self) -> None:
        """Keep a connection to the unit open, reconnecting on failure"""
        logger.info(f"Starting AMCU listener with {self.reconnect_seconds}s reconnect interval")

        self._ingest_task = asyncio.create_task(self._ingest_loop())
        try:
            while not self._stopping:
                try:
                    reader, writer = await self._connect()
                    try:
                        await self._read_connection(reader)
                        logger.warning("Collection unit closed the connection")
                    finally:
                        await self._disconnect(writer)
                except OSError as e:
                    self.last_error = str(e)
                    logger.error(f"Collection unit connection failed: {e}")

                if not self._stopping:
                    await asyncio.sleep(self.reconnect_seconds)
        finally:
            self._ingest_task.cancel()

    def start(self) -> None:
        """Run the listener as a background task on the current loop"""
        self._stopping = False
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        self._stopping = True
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def shutdown(self):
        """Cleanup resources"""
        await self.stop()
        await self.flush_dropped()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("AmcuListenerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Listen continuously using env.yaml settings
        python -m src.worker.amcu_listener

        # Read one connection and exit
        python -m src.worker.amcu_listener --host 192.168.1.50 --port 4001 --once
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="AMCU Listener Worker")
    parser.add_argument("--host", type=str, help="Collection unit address")
    parser.add_argument("--port", type=int, help="Collection unit TCP port")
    parser.add_argument("--once", action="store_true", help="Read one connection and exit")
    args = parser.parse_args()

    worker = AmcuListenerWorker(host=args.host, port=args.port)

    try:
        if args.once:
            results = await worker.run_once()
            print(f"AMCU read complete:")
            print(f"  Packets received: {worker.packets_received}")
            print(f"  Entries created: {sum(1 for r in results if r.parsed_ok)}")
            print(f"  Packets failed: {worker.packets_failed}")
            print(f"  Packets dropped: {worker.packets_dropped}")
        else:
            await worker.run_forever()
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
