"""Contract repository."""


from contractdesk.domain.contract import Contract
from contractdesk.repositories.base import BaseRepository


class ContractRepository(BaseRepository[Contract]):
    model = Contract

    async def record_sync_result(
        self, contract_id: str, *, drive_file_id: str, sheet_row_id: str | None,
    ) -> Contract | None:
        return await self.update(
            contract_id, drive_file_id=drive_file_id, sheet_row_id=sheet_row_id,
        )
