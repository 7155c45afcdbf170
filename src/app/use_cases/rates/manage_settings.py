"""Settings Use Cases

Settings share the rate cache with rate cards, so writes invalidate it.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.rate_cache import RateCache
from src.app.repositories.setting_repository import SettingRepository
from .dtos import SettingsResponseDTO, UpdateSettingsCommandDTO


class GetSettings:
    def __init__(self, setting_repo: SettingRepository):
        self.setting_repo = setting_repo

    async def execute(self) -> Result[SettingsResponseDTO]:
        settings = await self.setting_repo.get_all()
        return Return.ok(SettingsResponseDTO(settings=settings))


class UpdateSettings:
    """
    Use Case: Create or overwrite settings

    Unlisted keys are left alone.
    """

    def __init__(self, uow: UnitOfWork, setting_repo: SettingRepository, rate_cache: RateCache):
        self.uow = uow
        self.setting_repo = setting_repo
        self.rate_cache = rate_cache

    async def execute(self, command: UpdateSettingsCommandDTO) -> Result[SettingsResponseDTO]:
        try:
            for key, value in command.settings.items():
                await self.setting_repo.upsert(key, value)
            await self.uow.commit()
            self.rate_cache.invalidate()

            settings = await self.setting_repo.get_all()
            return Return.ok(SettingsResponseDTO(settings=settings))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_SETTINGS_FAILED",
                    message="Failed to update settings",
                    reason=str(e),
                )
            )
