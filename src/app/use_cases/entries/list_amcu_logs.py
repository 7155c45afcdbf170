"""List recent collection unit packet logs"""
from libs.result import Result, Return
from src.app.repositories.amcu_log_repository import AmcuLogRepository
from .dtos import AmcuLogDTO


class ListAmcuLogs:

    def __init__(self, amcu_log_repo: AmcuLogRepository):
        self.amcu_log_repo = amcu_log_repo

    async def execute(self, limit: int = 50) -> Result[list[AmcuLogDTO]]:
        logs = await self.amcu_log_repo.list_recent(limit=limit)
        return Return.ok(
            [
                AmcuLogDTO(
                    id=log.id,
                    raw_text=log.raw_text,
                    parsed_ok=log.parsed_ok,
                    error_code=log.error_code,
                    error_message=log.error_message,
                    entry_id=log.entry_id,
                    created_at=log.created_at,
                )
                for log in logs
            ]
        )
