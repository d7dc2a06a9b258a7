"""Bale (shared target line) data model."""

from pydantic import BaseModel, Field

from archers_edge.models.archer import Archer


class BaleArcher(Archer):
    """An archer placed on a lettered target of a bale."""

    target_assignment: str = Field(..., alias="targetAssignment")


class Bale(BaseModel):
    """Archers sharing one target line."""

    bale_number: int = Field(..., alias="baleNumber")
    division: str
    archers: list[BaleArcher] = []

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def get_targets(self) -> list[str]:
        """Target letters in use, in archer order."""
        return [a.target_assignment for a in self.archers]
