"""Reference to one patch set of a change under review."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PatchSetRef(BaseModel):
    """Identifies a patch set by change id and patch set number.

    Both values are opaque to the extractor.  They are only handed to the
    patch set history collaborator to look up the revision of the previous
    patch set.
    """

    model_config = ConfigDict(frozen=True)

    change_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the change the patch set belongs to.",
    )
    patch_set_number: int = Field(
        ...,
        ge=1,
        description="Patch set number within the change, starting at 1.",
    )

    @property
    def has_predecessor(self) -> bool:
        return self.patch_set_number > 1

    def predecessor(self) -> "PatchSetRef":
        """Return the reference of the previous patch set.

        Raises:
            ValueError: If this is the first patch set.
        """
        if not self.has_predecessor:
            raise ValueError(
                f"Patch set 1 of change {self.change_id} has no predecessor"
            )
        return PatchSetRef(
            change_id=self.change_id,
            patch_set_number=self.patch_set_number - 1,
        )
