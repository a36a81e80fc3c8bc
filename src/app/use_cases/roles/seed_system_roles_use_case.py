import logging
from typing import Any, Dict

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Role
from src.domain.permissions import SYSTEM_ROLES
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)


class SeedSystemRolesUseCase:
    """
    Creates the built-in roles that are missing. Existing rows are left as
    they are, so running it repeatedly is harmless.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[Dict[str, Any]]:
        created = []
        async with self.uow:
            for name, definition in SYSTEM_ROLES.items():
                if await self.uow.roles.get_by_name(name) is not None:
                    continue
                await self.uow.roles.create(
                    Role(
                        name=name,
                        description=definition["description"],
                        permissions=list(definition["permissions"]),
                        is_system=True,
                    )
                )
                created.append(name)
            await self.uow.commit()

        if created:
            logger.info(f"Seeded system roles: {', '.join(created)}")
        return Return.ok({"created": created})
